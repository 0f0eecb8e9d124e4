from webinars.domain.enums import (
    AttendeeStatus,
    CreditPool,
    PublicationStatus,
    ResourceType,
    TimeSlot,
    WebinarGroup,
    WebinarStatus,
)
from webinars.domain.models import (
    Account,
    Attendee,
    AttendeeView,
    RegistrationResult,
    Requester,
    Resource,
    Webinar,
    WebinarDraft,
    WebinarView,
)
from webinars.domain.value_objects import Money, TimeSlots, UserId, WebinarId

__all__ = [
    "Account",
    "Attendee",
    "AttendeeStatus",
    "AttendeeView",
    "CreditPool",
    "Money",
    "PublicationStatus",
    "RegistrationResult",
    "Requester",
    "Resource",
    "ResourceType",
    "TimeSlot",
    "TimeSlots",
    "UserId",
    "Webinar",
    "WebinarDraft",
    "WebinarGroup",
    "WebinarId",
    "WebinarStatus",
    "WebinarView",
]
