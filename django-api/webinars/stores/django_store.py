"""Django ORM implementation of the stores.

Attendee status and credit balances are only changed through
``filter(...).update(...)`` so the current value is checked by the
database in the same statement that writes the new one.
"""

import logging
import uuid
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from accounts.models import User as UserModel
from accounts.roles import UserRole
from webinars import models as orm
from webinars.domain import (
    Account,
    Attendee,
    AttendeeStatus,
    CreditPool,
    Money,
    PublicationStatus,
    Resource,
    ResourceType,
    TimeSlot,
    UserId,
    Webinar,
    WebinarDraft,
    WebinarGroup,
    WebinarId,
)
from webinars.domain.errors import AlreadyRegisteredError, UserExistsError, WebinarNotFoundError
from webinars.stores.interfaces import UserStore, WebinarStore

logger = logging.getLogger(__name__)

CATALOG_CACHE_TIMEOUT = 300

_CREDIT_FIELDS = {
    CreditPool.MASTER_CLASS: "master_class_credits",
    CreditPool.PHARMIA: "pharmia_credits",
}


def catalog_cache_key(webinar_id: uuid.UUID | str) -> str:
    return f"webinars:{webinar_id}:catalog"


def _to_attendee(row: orm.Attendee) -> Attendee:
    return Attendee(
        user_id=UserId(value=row.user_id),
        status=AttendeeStatus(row.status),
        registered_at=row.registered_at,
        time_slots=tuple(TimeSlot(slot) for slot in row.time_slots),
        proof_url=row.proof_url or None,
        used_credit=row.used_credit,
    )


def _to_webinar(row: orm.Webinar, with_attendees: bool = True) -> Webinar:
    attendees: tuple[Attendee, ...] = ()
    if with_attendees:
        attendees = tuple(_to_attendee(a) for a in row.attendees.all())
    return Webinar(
        id=WebinarId(value=row.id),
        title=row.title,
        description=row.description,
        presenter=row.presenter,
        date=row.date,
        group=WebinarGroup(row.group),
        price=Money(amount=Decimal(row.price)),
        publication_status=PublicationStatus(row.publication_status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        meeting_link=row.meeting_link or None,
        image_url=row.image_url or None,
        resources=tuple(
            Resource(type=ResourceType(r["type"]), title=r.get("title", ""), source=r.get("source", ""))
            for r in row.resources
        ),
        linked_content_ids=tuple(row.linked_content_ids),
        attendees=attendees,
    )


def _to_account(row: UserModel) -> Account:
    return Account(
        id=UserId(value=row.id),
        email=row.email,
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        role=UserRole(row.role),
        phone_number=row.phone_number,
        master_class_credits=row.master_class_credits,
        pharmia_credits=row.pharmia_credits,
    )


def _column_value(value: Any) -> Any:
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, (WebinarGroup, PublicationStatus)):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


class DjangoWebinarStore(WebinarStore):
    """Webinar store backed by the Django ORM."""

    def list_webinars(self, group: WebinarGroup | None = None, published_only: bool = False) -> list[Webinar]:
        queryset = orm.Webinar.objects.prefetch_related("attendees").order_by("-date")
        if group is not None:
            queryset = queryset.filter(group=group.value)
        if published_only:
            queryset = queryset.filter(publication_status=PublicationStatus.PUBLISHED.value)
        return [_to_webinar(row) for row in queryset]

    def list_webinars_for_user(self, user_id: UserId) -> list[Webinar]:
        queryset = (
            orm.Webinar.objects.filter(attendees__user_id=user_id.value)
            .prefetch_related("attendees")
            .order_by("-date")
        )
        return [_to_webinar(row) for row in queryset]

    def get_webinar(self, webinar_id: WebinarId) -> Webinar | None:
        row = orm.Webinar.objects.prefetch_related("attendees").filter(pk=webinar_id.value).first()
        return _to_webinar(row) if row else None

    def get_webinars_by_ids(self, webinar_ids: Iterable[WebinarId]) -> list[Webinar]:
        """Return catalog data (no attendees), cached per webinar."""
        ids = [wid.value for wid in webinar_ids]
        keys = {catalog_cache_key(wid): wid for wid in ids}
        cached: dict[str, Webinar] = cache.get_many(list(keys))
        missing = [keys[key] for key in keys if key not in cached]

        if missing:
            fetched = {}
            for row in orm.Webinar.objects.filter(pk__in=missing):
                webinar = _to_webinar(row, with_attendees=False)
                fetched[catalog_cache_key(row.id)] = webinar
            cache.set_many(fetched, CATALOG_CACHE_TIMEOUT)
            cached.update(fetched)

        return [cached[key] for key in keys if key in cached]

    def create_webinar(self, draft: WebinarDraft) -> Webinar:
        row = orm.Webinar.objects.create(
            title=draft.title,
            description=draft.description,
            presenter=draft.presenter,
            date=draft.date,
            group=draft.group.value,
            price=draft.price.amount,
            publication_status=draft.publication_status.value,
            meeting_link=draft.meeting_link or "",
            image_url=draft.image_url or "",
            linked_content_ids=list(draft.linked_content_ids),
        )
        return _to_webinar(row, with_attendees=False)

    def update_webinar(self, webinar_id: WebinarId, changes: dict[str, Any]) -> Webinar | None:
        row = orm.Webinar.objects.filter(pk=webinar_id.value).first()
        if row is None:
            return None
        for field, value in changes.items():
            value = _column_value(value)
            if field in ("meeting_link", "image_url") and value is None:
                value = ""
            setattr(row, field, value)
        row.save()
        return _to_webinar(row)

    def set_resources(self, webinar_id: WebinarId, resources: list[Resource]) -> bool:
        row = orm.Webinar.objects.filter(pk=webinar_id.value).first()
        if row is None:
            return False
        row.resources = [{"type": r.type.value, "title": r.title, "source": r.source} for r in resources]
        row.save(update_fields=["resources", "updated_at"])
        return True

    def delete_webinar(self, webinar_id: WebinarId) -> bool:
        row = orm.Webinar.objects.filter(pk=webinar_id.value).first()
        if row is None:
            return False
        row.delete()
        return True

    def add_attendee(self, webinar_id: WebinarId, attendee: Attendee) -> Attendee:
        try:
            with transaction.atomic():
                row = orm.Attendee.objects.create(
                    webinar_id=webinar_id.value,
                    user_id=attendee.user_id.value,
                    status=attendee.status.value,
                    time_slots=[slot.value for slot in attendee.time_slots],
                    proof_url=attendee.proof_url or "",
                    used_credit=attendee.used_credit,
                )
        except IntegrityError as exc:
            if not orm.Webinar.objects.filter(pk=webinar_id.value).exists():
                raise WebinarNotFoundError() from exc
            raise AlreadyRegisteredError() from exc
        return _to_attendee(row)

    def transition_status(
        self,
        webinar_id: WebinarId,
        user_id: UserId,
        from_statuses: Iterable[AttendeeStatus],
        to_status: AttendeeStatus,
        proof_url: str | None = None,
    ) -> bool:
        values: dict[str, Any] = {"status": to_status.value, "updated_at": timezone.now()}
        if proof_url is not None:
            values["proof_url"] = proof_url
        updated = orm.Attendee.objects.filter(
            webinar_id=webinar_id.value,
            user_id=user_id.value,
            status__in=[status.value for status in from_statuses],
        ).update(**values)
        return updated > 0

    def set_proof_url(self, webinar_id: WebinarId, user_id: UserId, proof_url: str) -> bool:
        updated = orm.Attendee.objects.filter(webinar_id=webinar_id.value, user_id=user_id.value).update(
            proof_url=proof_url, updated_at=timezone.now()
        )
        return updated > 0

    def set_time_slots(self, webinar_id: WebinarId, user_id: UserId, time_slots: tuple[TimeSlot, ...]) -> bool:
        updated = orm.Attendee.objects.filter(webinar_id=webinar_id.value, user_id=user_id.value).update(
            time_slots=[slot.value for slot in time_slots], updated_at=timezone.now()
        )
        return updated > 0

    def remove_attendee(self, webinar_id: WebinarId, user_id: UserId) -> bool:
        deleted, _ = orm.Attendee.objects.filter(webinar_id=webinar_id.value, user_id=user_id.value).delete()
        return deleted > 0


class DjangoUserStore(UserStore):
    """User store backed by the custom user model."""

    def get_user(self, user_id: UserId) -> Account | None:
        row = UserModel.objects.filter(pk=user_id.value).first()
        return _to_account(row) if row else None

    def get_users(self, user_ids: Iterable[UserId]) -> dict[UserId, Account]:
        rows = UserModel.objects.filter(pk__in=[uid.value for uid in user_ids])
        return {UserId(value=row.id): _to_account(row) for row in rows}

    def find_by_email(self, email: str) -> Account | None:
        row = UserModel.objects.filter(email__iexact=email.strip()).first()
        return _to_account(row) if row else None

    def create_user(self, email: str, first_name: str, last_name: str, phone_number: str = "") -> Account:
        row = UserModel(
            username=uuid.uuid4().hex,
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            role=UserRole.VISITEUR.value,
        )
        row.set_unusable_password()
        try:
            with transaction.atomic():
                row.save()
        except IntegrityError as exc:
            raise UserExistsError() from exc
        logger.info("Created visitor account %s", row.id)
        return _to_account(row)

    def delete_user(self, user_id: UserId) -> bool:
        deleted, _ = UserModel.objects.filter(pk=user_id.value).delete()
        return deleted > 0

    def decrement_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        field = _CREDIT_FIELDS[pool]
        updated = UserModel.objects.filter(pk=user_id.value, **{f"{field}__gte": amount}).update(
            **{field: F(field) - amount}
        )
        return updated > 0

    def increment_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        field = _CREDIT_FIELDS[pool]
        return UserModel.objects.filter(pk=user_id.value).update(**{field: F(field) + amount}) > 0
