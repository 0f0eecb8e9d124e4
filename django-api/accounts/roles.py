"""User roles, compared by value."""

from enum import StrEnum


class UserRole(StrEnum):
    VISITEUR = "VISITEUR"
    APPRENANT = "APPRENANT"
    FORMATEUR = "FORMATEUR"
    ADMIN = "ADMIN"
    ADMIN_WEBINAR = "ADMIN_WEBINAR"
    PHARMACIEN = "PHARMACIEN"
    PREPARATEUR = "PREPARATEUR"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    UserRole.VISITEUR: "Visiteur",
    UserRole.APPRENANT: "Apprenant",
    UserRole.FORMATEUR: "Formateur",
    UserRole.ADMIN: "Administrateur",
    UserRole.ADMIN_WEBINAR: "Administrateur webinaires",
    UserRole.PHARMACIEN: "Pharmacien",
    UserRole.PREPARATEUR: "Préparateur",
}

# Roles allowed to manage webinars and see attendee data.
ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.ADMIN_WEBINAR})
