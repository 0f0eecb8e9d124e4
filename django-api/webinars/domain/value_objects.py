"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Self
from uuid import UUID

from webinars.domain.enums import TimeSlot


@dataclass(frozen=True)
class WebinarId:
    """Unique identifier for a Webinar."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Unique identifier for a User."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price in TND, millime precision."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount:.3f}"


@dataclass(frozen=True)
class TimeSlots:
    """Non-empty, duplicate-free selection of time slots."""

    values: tuple[TimeSlot, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("At least one time slot is required")

    @classmethod
    def parse(cls, raw: Iterable[str] | None) -> Self:
        """Build from raw strings; raises ValueError on empty or unknown values."""
        if raw is None or isinstance(raw, str):
            raise ValueError("Time slots must be a list")
        slots: list[TimeSlot] = []
        for item in raw:
            slot = TimeSlot(item)
            if slot not in slots:
                slots.append(slot)
        return cls(values=tuple(slots))

    def as_list(self) -> list[str]:
        return [slot.value for slot in self.values]
