"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in webinars/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from accounts.roles import ADMIN_ROLES, UserRole
from webinars.domain.enums import (
    AttendeeStatus,
    CreditPool,
    PublicationStatus,
    ResourceType,
    TimeSlot,
    WebinarGroup,
    WebinarStatus,
)
from webinars.domain.value_objects import Money, UserId, WebinarId


@dataclass(frozen=True)
class Resource:
    """Material attached to a webinar (replay, slides, ...)."""

    type: ResourceType
    title: str
    source: str


@dataclass(frozen=True)
class Attendee:
    """One user's registration to one webinar."""

    user_id: UserId
    status: AttendeeStatus
    registered_at: datetime
    time_slots: tuple[TimeSlot, ...]
    proof_url: str | None = None
    used_credit: bool = False

    @property
    def is_confirmed(self) -> bool:
        return self.status == AttendeeStatus.CONFIRMED


@dataclass(frozen=True)
class Webinar:
    """Domain representation of a Webinar."""

    id: WebinarId
    title: str
    description: str
    presenter: str
    date: datetime
    group: WebinarGroup
    price: Money
    publication_status: PublicationStatus
    created_at: datetime
    updated_at: datetime
    meeting_link: str | None = None
    image_url: str | None = None
    resources: tuple[Resource, ...] = ()
    linked_content_ids: tuple[str, ...] = ()
    attendees: tuple[Attendee, ...] = ()

    @property
    def is_free(self) -> bool:
        return self.price.is_zero

    @property
    def is_published(self) -> bool:
        return self.publication_status == PublicationStatus.PUBLISHED

    def attendee_for(self, user_id: UserId) -> Attendee | None:
        for attendee in self.attendees:
            if attendee.user_id == user_id:
                return attendee
        return None


@dataclass(frozen=True)
class WebinarDraft:
    """Fields an admin supplies to create a webinar."""

    title: str
    description: str
    presenter: str
    date: datetime
    group: WebinarGroup = WebinarGroup.PHARMIA
    price: Money = Money(amount=Decimal("0"))
    publication_status: PublicationStatus = PublicationStatus.DRAFT
    meeting_link: str | None = None
    image_url: str | None = None
    linked_content_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Account:
    """The slice of a user record the webinar subsystem works with."""

    id: UserId
    email: str
    username: str
    first_name: str
    last_name: str
    role: UserRole
    phone_number: str = ""
    master_class_credits: int = 0
    pharmia_credits: int = 0

    @property
    def has_phone(self) -> bool:
        return bool(self.phone_number.strip())

    def balance(self, pool: CreditPool) -> int:
        if pool == CreditPool.MASTER_CLASS:
            return self.master_class_credits
        return self.pharmia_credits


@dataclass(frozen=True)
class Requester:
    """Who is calling. None is used for anonymous callers."""

    user_id: UserId
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class AttendeeView:
    """Attendee enriched with user details, for admin payloads."""

    attendee: Attendee
    account: Account | None


@dataclass(frozen=True)
class WebinarView:
    """Read-time projection of a webinar for one requester.

    meeting_link is already redacted and attendees is None unless the
    requester may see them.
    """

    webinar: Webinar
    calculated_status: WebinarStatus
    is_registered: bool
    registration_status: AttendeeStatus | None
    meeting_link: str | None
    attendees: tuple[AttendeeView, ...] | None = None


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration call.

    account is None when an anonymous caller registered an existing account,
    whose details must not be disclosed.
    """

    webinar_id: WebinarId
    attendee: Attendee
    account: Account | None
    session_token: str | None = None
    guest_token: str | None = None
