"""Closed value sets shared by the domain, the ORM models and the cart."""

from enum import StrEnum


class WebinarGroup(StrEnum):
    CROP_TUNIS = "CROP_TUNIS"
    PHARMIA = "PHARMIA"
    MASTER_CLASS = "MASTER_CLASS"


class WebinarStatus(StrEnum):
    """Status computed from the clock on every read. Never persisted."""

    UPCOMING = "UPCOMING"
    LIVE = "LIVE"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    PAST = "PAST"


class PublicationStatus(StrEnum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class AttendeeStatus(StrEnum):
    PENDING = "PENDING"
    PAYMENT_SUBMITTED = "PAYMENT_SUBMITTED"
    CONFIRMED = "CONFIRMED"


class TimeSlot(StrEnum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    PHARMIA_TUESDAY = "PHARMIA_TUESDAY"
    PHARMIA_FRIDAY = "PHARMIA_FRIDAY"


class CreditPool(StrEnum):
    MASTER_CLASS = "MASTER_CLASS"
    PHARMIA = "PHARMIA"


class ResourceType(StrEnum):
    REPLAY = "Replay"
    DIAPORAMA = "Diaporama"
    INFOGRAPHIE = "Infographie"
    PDF = "pdf"
    LINK = "link"
    YOUTUBE = "youtube"


# Slots offered by the registration form for each group.
GROUP_TIME_SLOTS = {
    WebinarGroup.CROP_TUNIS: (TimeSlot.MORNING, TimeSlot.AFTERNOON, TimeSlot.EVENING),
    WebinarGroup.PHARMIA: (TimeSlot.PHARMIA_TUESDAY, TimeSlot.PHARMIA_FRIDAY),
    WebinarGroup.MASTER_CLASS: (),
}

# Groups whose registrations can be paid with a credit.
GROUP_CREDIT_POOLS = {
    WebinarGroup.MASTER_CLASS: CreditPool.MASTER_CLASS,
    WebinarGroup.PHARMIA: CreditPool.PHARMIA,
}
