"""In-memory stores and ports for service unit tests."""

import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from accounts.roles import UserRole
from webinars.domain import (
    Account,
    Attendee,
    AttendeeStatus,
    CreditPool,
    Money,
    PublicationStatus,
    Resource,
    TimeSlot,
    UserId,
    Webinar,
    WebinarDraft,
    WebinarGroup,
    WebinarId,
)
from webinars.domain.errors import AlreadyRegisteredError, UserExistsError, WebinarNotFoundError
from webinars.services.ports import Notifier, TokenIssuer
from webinars.stores.interfaces import UserStore, WebinarStore

TUNIS = timezone(timedelta(hours=1))
NOW = datetime(2026, 3, 10, 10, 0, tzinfo=TUNIS)


def make_webinar(**overrides: Any) -> Webinar:
    fields: dict[str, Any] = {
        "id": WebinarId(value=uuid.uuid4()),
        "title": "Les antibiotiques en officine",
        "description": "Bon usage et conseils au comptoir.",
        "presenter": "Dr. Ben Salah",
        "date": NOW + timedelta(days=7),
        "group": WebinarGroup.CROP_TUNIS,
        "price": Money(amount=Decimal("80.000")),
        "publication_status": PublicationStatus.PUBLISHED,
        "created_at": NOW,
        "updated_at": NOW,
        "meeting_link": "https://meet.google.com/abc-defg-hij",
    }
    fields.update(overrides)
    return Webinar(**fields)


def make_account(**overrides: Any) -> Account:
    user_id = overrides.pop("id", None) or UserId(value=uuid.uuid4())
    fields: dict[str, Any] = {
        "id": user_id,
        "email": f"{user_id.value.hex[:8]}@example.tn",
        "username": user_id.value.hex,
        "first_name": "Amel",
        "last_name": "Trabelsi",
        "role": UserRole.PHARMACIEN,
        "phone_number": "22123456",
    }
    fields.update(overrides)
    return Account(**fields)


def make_attendee(user_id: UserId, status: AttendeeStatus = AttendeeStatus.CONFIRMED, **overrides: Any) -> Attendee:
    fields: dict[str, Any] = {
        "user_id": user_id,
        "status": status,
        "registered_at": NOW,
        "time_slots": (TimeSlot.MORNING,),
    }
    fields.update(overrides)
    return Attendee(**fields)


class InMemoryWebinarStore(WebinarStore):
    def __init__(self, webinars: Iterable[Webinar] = ()) -> None:
        self.webinars: dict[WebinarId, Webinar] = {w.id: w for w in webinars}

    def put(self, webinar: Webinar) -> Webinar:
        self.webinars[webinar.id] = webinar
        return webinar

    def list_webinars(self, group: WebinarGroup | None = None, published_only: bool = False) -> list[Webinar]:
        webinars = [
            w
            for w in self.webinars.values()
            if (group is None or w.group == group) and (not published_only or w.is_published)
        ]
        return sorted(webinars, key=lambda w: w.date, reverse=True)

    def list_webinars_for_user(self, user_id: UserId) -> list[Webinar]:
        return [w for w in self.list_webinars() if w.attendee_for(user_id)]

    def get_webinar(self, webinar_id: WebinarId) -> Webinar | None:
        return self.webinars.get(webinar_id)

    def get_webinars_by_ids(self, webinar_ids: Iterable[WebinarId]) -> list[Webinar]:
        return [replace(self.webinars[wid], attendees=()) for wid in webinar_ids if wid in self.webinars]

    def create_webinar(self, draft: WebinarDraft) -> Webinar:
        webinar = Webinar(
            id=WebinarId(value=uuid.uuid4()),
            title=draft.title,
            description=draft.description,
            presenter=draft.presenter,
            date=draft.date,
            group=draft.group,
            price=draft.price,
            publication_status=draft.publication_status,
            created_at=NOW,
            updated_at=NOW,
            meeting_link=draft.meeting_link,
            image_url=draft.image_url,
            linked_content_ids=draft.linked_content_ids,
        )
        return self.put(webinar)

    def update_webinar(self, webinar_id: WebinarId, changes: dict[str, Any]) -> Webinar | None:
        webinar = self.webinars.get(webinar_id)
        if webinar is None:
            return None
        return self.put(replace(webinar, **changes))

    def set_resources(self, webinar_id: WebinarId, resources: list[Resource]) -> bool:
        webinar = self.webinars.get(webinar_id)
        if webinar is None:
            return False
        self.put(replace(webinar, resources=tuple(resources)))
        return True

    def delete_webinar(self, webinar_id: WebinarId) -> bool:
        return self.webinars.pop(webinar_id, None) is not None

    def add_attendee(self, webinar_id: WebinarId, attendee: Attendee) -> Attendee:
        webinar = self.webinars.get(webinar_id)
        if webinar is None:
            raise WebinarNotFoundError()
        if webinar.attendee_for(attendee.user_id) is not None:
            raise AlreadyRegisteredError()
        self.put(replace(webinar, attendees=webinar.attendees + (attendee,)))
        return attendee

    def _replace_attendee(self, webinar_id: WebinarId, user_id: UserId, **changes: Any) -> bool:
        webinar = self.webinars.get(webinar_id)
        if webinar is None or webinar.attendee_for(user_id) is None:
            return False
        attendees = tuple(replace(a, **changes) if a.user_id == user_id else a for a in webinar.attendees)
        self.put(replace(webinar, attendees=attendees))
        return True

    def transition_status(
        self,
        webinar_id: WebinarId,
        user_id: UserId,
        from_statuses: Iterable[AttendeeStatus],
        to_status: AttendeeStatus,
        proof_url: str | None = None,
    ) -> bool:
        webinar = self.webinars.get(webinar_id)
        attendee = webinar.attendee_for(user_id) if webinar else None
        if attendee is None or attendee.status not in tuple(from_statuses):
            return False
        changes: dict[str, Any] = {"status": to_status}
        if proof_url is not None:
            changes["proof_url"] = proof_url
        return self._replace_attendee(webinar_id, user_id, **changes)

    def set_proof_url(self, webinar_id: WebinarId, user_id: UserId, proof_url: str) -> bool:
        return self._replace_attendee(webinar_id, user_id, proof_url=proof_url)

    def set_time_slots(self, webinar_id: WebinarId, user_id: UserId, time_slots: tuple[TimeSlot, ...]) -> bool:
        return self._replace_attendee(webinar_id, user_id, time_slots=tuple(time_slots))

    def remove_attendee(self, webinar_id: WebinarId, user_id: UserId) -> bool:
        webinar = self.webinars.get(webinar_id)
        if webinar is None or webinar.attendee_for(user_id) is None:
            return False
        self.put(replace(webinar, attendees=tuple(a for a in webinar.attendees if a.user_id != user_id)))
        return True


class StaleReadWebinarStore(InMemoryWebinarStore):
    """Returns webinars as they were before any attendee was added.

    Simulates two requests that both read the webinar before either writes.
    """

    def get_webinar(self, webinar_id: WebinarId) -> Webinar | None:
        webinar = self.webinars.get(webinar_id)
        return replace(webinar, attendees=()) if webinar else None


class VanishingWebinarStore(InMemoryWebinarStore):
    """Deletes the webinar when the first attendee insert arrives, as a concurrent delete would."""

    vanished = False

    def add_attendee(self, webinar_id: WebinarId, attendee: Attendee) -> Attendee:
        if not self.vanished:
            self.vanished = True
            self.webinars.pop(webinar_id, None)
        return super().add_attendee(webinar_id, attendee)


class InMemoryUserStore(UserStore):
    def __init__(self, accounts: Iterable[Account] = ()) -> None:
        self.accounts: dict[UserId, Account] = {a.id: a for a in accounts}

    def get_user(self, user_id: UserId) -> Account | None:
        return self.accounts.get(user_id)

    def get_users(self, user_ids: Iterable[UserId]) -> dict[UserId, Account]:
        return {uid: self.accounts[uid] for uid in user_ids if uid in self.accounts}

    def find_by_email(self, email: str) -> Account | None:
        email = email.strip().lower()
        return next((a for a in self.accounts.values() if a.email.lower() == email), None)

    def create_user(self, email: str, first_name: str, last_name: str, phone_number: str = "") -> Account:
        if self.find_by_email(email) is not None:
            raise UserExistsError()
        account = make_account(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            role=UserRole.VISITEUR,
        )
        self.accounts[account.id] = account
        return account

    def delete_user(self, user_id: UserId) -> bool:
        return self.accounts.pop(user_id, None) is not None

    def _field(self, pool: CreditPool) -> str:
        return "master_class_credits" if pool == CreditPool.MASTER_CLASS else "pharmia_credits"

    def decrement_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        account = self.accounts.get(user_id)
        if account is None or account.balance(pool) < amount:
            return False
        self.accounts[user_id] = replace(account, **{self._field(pool): account.balance(pool) - amount})
        return True

    def increment_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        account = self.accounts.get(user_id)
        if account is None:
            return False
        self.accounts[user_id] = replace(account, **{self._field(pool): account.balance(pool) + amount})
        return True


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.confirmations: list[tuple[UserId, WebinarId]] = []
        self.newsletter: list[tuple[str, str]] = []

    def registration_confirmed(self, account: Account, webinar: Webinar) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.confirmations.append((account.id, webinar.id))

    def add_to_newsletter_group(self, email: str, group_name: str) -> None:
        if self.fail:
            raise RuntimeError("newsletter down")
        self.newsletter.append((email, group_name))


class FakeTokenIssuer(TokenIssuer):
    def session_token(self, account: Account) -> str:
        return f"session:{account.id}"

    def guest_token(self, account: Account, webinar_id: WebinarId) -> str:
        return f"guest:{account.id}:{webinar_id}"
