"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every state transition
on an attendee or a balance is a single conditional write keyed on the
current state; methods report whether anything matched.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from webinars.domain import (
    Account,
    Attendee,
    AttendeeStatus,
    CreditPool,
    Resource,
    TimeSlot,
    UserId,
    Webinar,
    WebinarDraft,
    WebinarGroup,
    WebinarId,
)


class WebinarStore(ABC):
    """Interface for webinar and attendee persistence."""

    @abstractmethod
    def list_webinars(self, group: WebinarGroup | None = None, published_only: bool = False) -> list[Webinar]:
        """Return webinars ordered by date descending."""
        ...

    @abstractmethod
    def list_webinars_for_user(self, user_id: UserId) -> list[Webinar]:
        """Return webinars the user is registered to, ordered by date descending."""
        ...

    @abstractmethod
    def get_webinar(self, webinar_id: WebinarId) -> Webinar | None:
        """Return a webinar with its attendees, or None if not found."""
        ...

    @abstractmethod
    def get_webinars_by_ids(self, webinar_ids: Iterable[WebinarId]) -> list[Webinar]:
        """Return the webinars that exist among the given ids."""
        ...

    @abstractmethod
    def create_webinar(self, draft: WebinarDraft) -> Webinar:
        ...

    @abstractmethod
    def update_webinar(self, webinar_id: WebinarId, changes: dict[str, Any]) -> Webinar | None:
        """Apply field changes. Attendees are never touched. None if not found."""
        ...

    @abstractmethod
    def set_resources(self, webinar_id: WebinarId, resources: list[Resource]) -> bool:
        ...

    @abstractmethod
    def delete_webinar(self, webinar_id: WebinarId) -> bool:
        ...

    @abstractmethod
    def add_attendee(self, webinar_id: WebinarId, attendee: Attendee) -> Attendee:
        """Insert an attendee.

        Raises:
            AlreadyRegisteredError: If the user already has a record for this webinar.
            WebinarNotFoundError: If the webinar no longer exists.
        """
        ...

    @abstractmethod
    def transition_status(
        self,
        webinar_id: WebinarId,
        user_id: UserId,
        from_statuses: Iterable[AttendeeStatus],
        to_status: AttendeeStatus,
        proof_url: str | None = None,
    ) -> bool:
        """Set the status only if the current status is one of from_statuses."""
        ...

    @abstractmethod
    def set_proof_url(self, webinar_id: WebinarId, user_id: UserId, proof_url: str) -> bool:
        ...

    @abstractmethod
    def set_time_slots(self, webinar_id: WebinarId, user_id: UserId, time_slots: tuple[TimeSlot, ...]) -> bool:
        ...

    @abstractmethod
    def remove_attendee(self, webinar_id: WebinarId, user_id: UserId) -> bool:
        ...


class UserStore(ABC):
    """Interface for the user records the webinar subsystem reads and debits."""

    @abstractmethod
    def get_user(self, user_id: UserId) -> Account | None:
        ...

    @abstractmethod
    def get_users(self, user_ids: Iterable[UserId]) -> dict[UserId, Account]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Account | None:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    def create_user(self, email: str, first_name: str, last_name: str, phone_number: str = "") -> Account:
        """Create a visitor account with an unusable password.

        Raises:
            UserExistsError: If the email is already taken.
        """
        ...

    @abstractmethod
    def delete_user(self, user_id: UserId) -> bool:
        """Delete an account created by a registration that then failed."""
        ...

    @abstractmethod
    def decrement_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        """Decrement only if the balance is at least amount. False if nothing matched."""
        ...

    @abstractmethod
    def increment_credits(self, user_id: UserId, pool: CreditPool, amount: int) -> bool:
        ...
