"""Domain error codes for the webinars module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_WEBINAR_ID = "INVALID_WEBINAR_ID"
    INVALID_USER_ID = "INVALID_USER_ID"
    TIME_SLOTS_REQUIRED = "TIME_SLOTS_REQUIRED"
    PHONE_REQUIRED = "PHONE_REQUIRED"
    CREDIT_NOT_APPLICABLE = "CREDIT_NOT_APPLICABLE"
    WEBINAR_NOT_FOUND = "WEBINAR_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    ALREADY_CONFIRMED = "ALREADY_CONFIRMED"
    USER_EXISTS = "USER_EXISTS"
    HAS_ATTENDEES = "HAS_ATTENDEES"
    INSUFFICIENT_CREDIT = "INSUFFICIENT_CREDIT"
    PERMISSION_DENIED = "PERMISSION_DENIED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when input is malformed. Checked before any store access."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)


class InvalidWebinarIdError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_WEBINAR_ID, message="Identifiant de webinaire invalide.")


class InvalidUserIdError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_USER_ID, message="Identifiant d'utilisateur invalide.")


class TimeSlotsRequiredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TIME_SLOTS_REQUIRED,
            message="Au moins un créneau horaire est requis.",
        )


class PhoneRequiredError(DomainError):
    """Free registrations need a phone number on the profile."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PHONE_REQUIRED,
            message="Un numéro de téléphone est requis pour l'inscription gratuite.",
        )


class CreditNotApplicableError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CREDIT_NOT_APPLICABLE,
            message="Les crédits ne peuvent pas être utilisés pour ce webinaire.",
        )


class WebinarNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.WEBINAR_NOT_FOUND, message="Webinaire non trouvé.")


class UserNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="Utilisateur non trouvé.")


class RegistrationNotFoundError(DomainError):
    """Raised when no attendee matches, including status-filtered updates."""

    def __init__(self, message: str = "Inscription non trouvée.") -> None:
        super().__init__(code=ErrorCode.REGISTRATION_NOT_FOUND, message=message)


class AlreadyRegisteredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="Vous êtes déjà inscrit à ce webinaire.",
        )


class AlreadyConfirmedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CONFIRMED,
            message="Cette inscription est déjà confirmée.",
        )


class UserExistsError(DomainError):
    """A public free registration hit an existing account."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.USER_EXISTS,
            message="Un compte existe déjà avec cet email. Veuillez vous connecter pour vous inscrire.",
        )


class HasAttendeesError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.HAS_ATTENDEES,
            message="Ce webinaire a des inscrits. Confirmez la suppression pour continuer.",
        )


class InsufficientCreditError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INSUFFICIENT_CREDIT, message="Crédit insuffisant.")


class PermissionDeniedError(DomainError):
    def __init__(self, message: str = "Vous n'avez pas la permission d'effectuer cette action.") -> None:
        super().__init__(code=ErrorCode.PERMISSION_DENIED, message=message)
