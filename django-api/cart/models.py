"""Cart line items and operation results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from webinars.domain.enums import TimeSlot, WebinarGroup


class ItemType(StrEnum):
    WEBINAR = "WEBINAR"
    PACK = "PACK"


@dataclass(frozen=True)
class CartItem:
    """A pending purchase: a webinar with its slots, or a credit pack."""

    type: ItemType
    id: str
    title: str
    group: WebinarGroup
    price_ht: Decimal = Decimal("0")
    slots: tuple[TimeSlot, ...] = ()
    credits: int = 0
    date: datetime | None = None

    @property
    def is_webinar(self) -> bool:
        return self.type == ItemType.WEBINAR

    @property
    def needs_slots(self) -> bool:
        """Master classes have a fixed schedule, other webinars need a slot choice."""
        return self.is_webinar and self.group != WebinarGroup.MASTER_CLASS


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart mutation. Failed results leave the cart untouched."""

    ok: bool
    message: str = ""
    items: tuple[CartItem, ...] = field(default=())
