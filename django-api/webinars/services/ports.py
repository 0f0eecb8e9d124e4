"""Interfaces to collaborators outside the webinar subsystem."""

from abc import ABC, abstractmethod

from webinars.domain import Account, Webinar, WebinarId


class Notifier(ABC):
    """Side effects that must never fail a registration."""

    @abstractmethod
    def registration_confirmed(self, account: Account, webinar: Webinar) -> None:
        """Send the confirmation email. Fire-and-forget."""
        ...

    @abstractmethod
    def add_to_newsletter_group(self, email: str, group_name: str) -> None:
        ...


class TokenIssuer(ABC):
    """Signs tokens for accounts created by public registration."""

    @abstractmethod
    def session_token(self, account: Account) -> str:
        ...

    @abstractmethod
    def guest_token(self, account: Account, webinar_id: WebinarId) -> str:
        """Token that only allows submitting a payment proof for webinar_id."""
        ...
