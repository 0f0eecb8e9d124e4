"""Registration service - the attendee state machine.

An attendee moves PENDING -> PAYMENT_SUBMITTED -> CONFIRMED, or is created
CONFIRMED directly on the free, credit and admin paths. Status never moves
backwards; removal is a hard delete.

Services:
- Depend only on interfaces (stores, ports)
- Validate input before any store access
- Return domain models or raise domain errors
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from webinars.domain import (
    Account,
    Attendee,
    AttendeeStatus,
    CreditPool,
    RegistrationResult,
    Requester,
    TimeSlots,
    UserId,
    Webinar,
    WebinarId,
)
from webinars.domain.errors import (
    AlreadyConfirmedError,
    AlreadyRegisteredError,
    InvalidUserIdError,
    InvalidWebinarIdError,
    PermissionDeniedError,
    PhoneRequiredError,
    RegistrationNotFoundError,
    TimeSlotsRequiredError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
    WebinarNotFoundError,
)
from webinars.domain.links import standardize_proof_url
from webinars.services.credit_ledger import CreditLedger, pool_for_group
from webinars.services.ports import Notifier, TokenIssuer
from webinars.stores.interfaces import UserStore, WebinarStore

logger = logging.getLogger(__name__)

NEWSLETTER_GROUP = "Webinar Participants"


def parse_webinar_id(raw: str) -> WebinarId:
    try:
        return WebinarId.from_string(raw)
    except (TypeError, ValueError):
        raise InvalidWebinarIdError() from None


def parse_user_id(raw: str) -> UserId:
    try:
        return UserId.from_string(raw)
    except (TypeError, ValueError):
        raise InvalidUserIdError() from None


def parse_time_slots(raw: Iterable[str] | None) -> TimeSlots:
    if not raw or isinstance(raw, str):
        raise TimeSlotsRequiredError()
    try:
        return TimeSlots.parse(raw)
    except ValueError:
        raise ValidationError("Créneau horaire inconnu.") from None


class RegistrationService:
    """Owns the lifecycle of attendee records."""

    def __init__(
        self,
        webinars: WebinarStore,
        users: UserStore,
        ledger: CreditLedger,
        notifier: Notifier,
        tokens: TokenIssuer,
        clock: Callable[[], datetime],
        newsletter_group: str = NEWSLETTER_GROUP,
    ) -> None:
        self._webinars = webinars
        self._users = users
        self._ledger = ledger
        self._notifier = notifier
        self._tokens = tokens
        self._clock = clock
        self._newsletter_group = newsletter_group

    # ------------------------------------------------------------------
    # Registration entry points
    # ------------------------------------------------------------------

    def register(
        self,
        webinar_id: str,
        requester: Requester,
        time_slots: Iterable[str] | None,
        use_credit: bool = False,
    ) -> RegistrationResult:
        """Register the requester.

        Raises:
            TimeSlotsRequiredError: If no slot is given.
            WebinarNotFoundError: If the webinar does not exist or is not visible.
            AlreadyRegisteredError: If the requester already has a record.
            PhoneRequiredError: Free webinar and no phone number on the profile.
            CreditNotApplicableError: Credit requested for a group without a pool.
            InsufficientCreditError: Credit requested and the balance is empty.
        """
        slots = parse_time_slots(time_slots)
        wid = parse_webinar_id(webinar_id)
        webinar = self._visible_webinar(wid, requester)
        account = self._users.get_user(requester.user_id)
        if account is None:
            raise UserNotFoundError()
        return self._register_account(webinar, account, slots, use_credit)

    def public_register(
        self,
        webinar_id: str,
        first_name: str,
        last_name: str,
        email: str,
        time_slots: Iterable[str] | None,
        phone: str | None = None,
    ) -> RegistrationResult:
        """Register an anonymous visitor, creating the account when needed.

        Free webinars refuse existing accounts (the visitor must log in) and
        return a session token for the new account. Paid webinars create a
        PENDING registration and return a short-lived guest token scoped to
        this webinar. When the email already has an account the registration
        is recorded for it but nothing about the account is returned, no
        token is issued and the profile is left untouched; the owner logs in
        to submit the payment proof.

        A visitor account created here is deleted again if the attendee
        insert fails, so a retry does not hit USER_EXISTS.

        Raises:
            ValidationError: If a name or the email is missing.
            PhoneRequiredError: Free webinar and no phone given.
            UserExistsError: Free webinar and the email already has an account.
        """
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        email = (email or "").strip().lower()
        phone = (phone or "").strip()
        if not first_name or not last_name or not email:
            raise ValidationError("Le prénom, le nom et l'email sont obligatoires.")
        slots = parse_time_slots(time_slots)
        wid = parse_webinar_id(webinar_id)
        webinar = self._visible_webinar(wid, None)

        if webinar.is_free:
            if not phone:
                raise PhoneRequiredError()
            if self._users.find_by_email(email) is not None:
                raise UserExistsError()
            account = self._users.create_user(email, first_name, last_name, phone)
            result = self._register_new_account(webinar, account, slots)
            self._join_newsletter(email)
            return replace(result, session_token=self._tokens.session_token(account))

        existing = self._users.find_by_email(email)
        if existing is None:
            try:
                account = self._users.create_user(email, first_name, last_name, phone)
            except UserExistsError:
                # Created concurrently by another request.
                existing = self._users.find_by_email(email)
                if existing is None:
                    raise
            else:
                result = self._register_new_account(webinar, account, slots)
                self._join_newsletter(email)
                return replace(result, guest_token=self._tokens.guest_token(account, webinar.id))

        result = self._register_account(webinar, existing, slots, use_credit=False)
        self._join_newsletter(email)
        logger.info("Anonymous paid registration recorded for existing account %s", existing.id)
        return replace(result, account=None)

    def add_attendee(self, webinar_id: str, user_id: str, time_slots: Iterable[str] | None) -> Attendee:
        """Admin path: insert a CONFIRMED attendee without payment."""
        slots = parse_time_slots(time_slots)
        wid = parse_webinar_id(webinar_id)
        uid = parse_user_id(user_id)
        webinar = self._require_webinar(wid)
        account = self._users.get_user(uid)
        if account is None:
            raise UserNotFoundError()
        if webinar.attendee_for(uid) is not None:
            raise AlreadyRegisteredError()

        attendee = self._insert(webinar, self._new_attendee(uid, slots, AttendeeStatus.CONFIRMED))
        logger.info("Admin added attendee %s to webinar %s", uid, wid)
        self._notify_confirmed(account, webinar)
        return attendee

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def submit_payment(self, webinar_id: str, requester: Requester, proof_url: str | None) -> None:
        """PENDING or PAYMENT_SUBMITTED -> PAYMENT_SUBMITTED with a proof.

        Raises:
            RegistrationNotFoundError: If the requester is not registered.
            AlreadyConfirmedError: If the registration is already confirmed.
        """
        if not proof_url or not isinstance(proof_url, str):
            raise ValidationError("L'URL de la preuve de paiement est requise.")
        wid = parse_webinar_id(webinar_id)
        moved = self._webinars.transition_status(
            wid,
            requester.user_id,
            from_statuses=(AttendeeStatus.PENDING, AttendeeStatus.PAYMENT_SUBMITTED),
            to_status=AttendeeStatus.PAYMENT_SUBMITTED,
            proof_url=standardize_proof_url(proof_url),
        )
        if moved:
            logger.info("Payment proof submitted by %s for webinar %s", requester.user_id, wid)
            return

        webinar = self._require_webinar(wid)
        if webinar.attendee_for(requester.user_id) is None:
            raise RegistrationNotFoundError()
        raise AlreadyConfirmedError()

    def confirm_payment(self, webinar_id: str, user_id: str) -> None:
        """Admin: PAYMENT_SUBMITTED -> CONFIRMED.

        The update only matches an attendee currently in PAYMENT_SUBMITTED, so a
        never-submitted or already-confirmed registration is left untouched.

        Raises:
            RegistrationNotFoundError: If no attendee awaits confirmation.
        """
        wid = parse_webinar_id(webinar_id)
        uid = parse_user_id(user_id)
        moved = self._webinars.transition_status(
            wid,
            uid,
            from_statuses=(AttendeeStatus.PAYMENT_SUBMITTED,),
            to_status=AttendeeStatus.CONFIRMED,
        )
        if not moved:
            raise RegistrationNotFoundError("Aucune preuve de paiement en attente pour cette inscription.")

        logger.info("Payment confirmed for %s on webinar %s", uid, wid)
        webinar = self._webinars.get_webinar(wid)
        account = self._users.get_user(uid)
        if webinar is not None and account is not None:
            self._notify_confirmed(account, webinar)

    def override_proof(self, webinar_id: str, user_id: str, proof_url: str | None) -> None:
        """Admin: replace the proof URL whatever the status."""
        if not proof_url or not isinstance(proof_url, str):
            raise ValidationError("L'URL de la preuve de paiement est requise.")
        wid = parse_webinar_id(webinar_id)
        uid = parse_user_id(user_id)
        if not self._webinars.set_proof_url(wid, uid, standardize_proof_url(proof_url)):
            raise RegistrationNotFoundError()
        logger.info("Payment proof overridden for %s on webinar %s", uid, wid)

    def remove_attendee(self, webinar_id: str, user_id: str) -> None:
        """Admin: hard delete. Credits spent on the registration are not refunded."""
        wid = parse_webinar_id(webinar_id)
        uid = parse_user_id(user_id)
        if self._webinars.remove_attendee(wid, uid):
            logger.info("Removed attendee %s from webinar %s", uid, wid)
            return
        self._require_webinar(wid)
        raise RegistrationNotFoundError()

    def update_slots(
        self,
        webinar_id: str,
        user_id: str,
        requester: Requester,
        new_slots: Iterable[str] | None,
    ) -> None:
        """Replace the slot selection. Only the attendee or an ADMIN may do it."""
        wid = parse_webinar_id(webinar_id)
        uid = parse_user_id(user_id)
        if requester.user_id != uid and not requester.is_superadmin:
            raise PermissionDeniedError("Vous ne pouvez modifier que vos propres créneaux.")
        slots = parse_time_slots(new_slots)
        if not self._webinars.set_time_slots(wid, uid, slots.values):
            raise RegistrationNotFoundError()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register_account(
        self,
        webinar: Webinar,
        account: Account,
        slots: TimeSlots,
        use_credit: bool,
    ) -> RegistrationResult:
        if webinar.attendee_for(account.id) is not None:
            raise AlreadyRegisteredError()

        if webinar.is_free:
            if not account.has_phone:
                raise PhoneRequiredError()
            attendee = self._insert(webinar, self._new_attendee(account.id, slots, AttendeeStatus.CONFIRMED))
            self._notify_confirmed(account, webinar)
        elif use_credit:
            attendee = self._register_with_credit(webinar, account, slots)
            self._notify_confirmed(account, webinar)
        else:
            attendee = self._insert(webinar, self._new_attendee(account.id, slots, AttendeeStatus.PENDING))

        logger.info(
            "User %s registered to webinar %s with status %s",
            account.id,
            webinar.id,
            attendee.status,
        )
        return RegistrationResult(webinar_id=webinar.id, attendee=attendee, account=account)

    def _register_with_credit(self, webinar: Webinar, account: Account, slots: TimeSlots) -> Attendee:
        pool = pool_for_group(webinar.group)
        self._ledger.debit(account.id, pool)
        try:
            return self._insert(
                webinar,
                self._new_attendee(account.id, slots, AttendeeStatus.CONFIRMED, used_credit=True),
            )
        except Exception:
            self._refund(account.id, pool)
            raise

    def _refund(self, user_id: UserId, pool: CreditPool) -> None:
        logger.warning("Attendee insert failed after debit, refunding %s credit to %s", pool, user_id)
        try:
            self._ledger.credit(user_id, pool, 1)
        except Exception:
            logger.exception("Credit refund failed for user %s on %s", user_id, pool)

    def _insert(self, webinar: Webinar, attendee: Attendee) -> Attendee:
        return self._webinars.add_attendee(webinar.id, attendee)

    def _new_attendee(
        self,
        user_id: UserId,
        slots: TimeSlots,
        status: AttendeeStatus,
        used_credit: bool = False,
    ) -> Attendee:
        return Attendee(
            user_id=user_id,
            status=status,
            registered_at=self._clock(),
            time_slots=slots.values,
            used_credit=used_credit,
        )

    def _register_new_account(self, webinar: Webinar, account: Account, slots: TimeSlots) -> RegistrationResult:
        try:
            return self._register_account(webinar, account, slots, use_credit=False)
        except Exception:
            self._discard_account(account)
            raise

    def _discard_account(self, account: Account) -> None:
        logger.warning("Registration failed, deleting new visitor account %s", account.id)
        try:
            self._users.delete_user(account.id)
        except Exception:
            logger.exception("Could not delete visitor account %s", account.id)

    def _require_webinar(self, webinar_id: WebinarId) -> Webinar:
        webinar = self._webinars.get_webinar(webinar_id)
        if webinar is None:
            raise WebinarNotFoundError()
        return webinar

    def _visible_webinar(self, webinar_id: WebinarId, requester: Requester | None) -> Webinar:
        webinar = self._require_webinar(webinar_id)
        if not webinar.is_published and not (requester and requester.is_admin):
            raise WebinarNotFoundError()
        return webinar

    def _notify_confirmed(self, account: Account, webinar: Webinar) -> None:
        try:
            self._notifier.registration_confirmed(account, webinar)
        except Exception:
            logger.exception("Could not send confirmation email to %s", account.id)

    def _join_newsletter(self, email: str) -> None:
        try:
            self._notifier.add_to_newsletter_group(email, self._newsletter_group)
        except Exception:
            logger.exception("Could not add %s to newsletter group", email)
