from rest_framework.permissions import BasePermission

from accounts.roles import ADMIN_ROLES, UserRole


class IsAdminRole(BasePermission):
    """ADMIN or ADMIN_WEBINAR."""

    message = "Accès réservé aux administrateurs."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.role in ADMIN_ROLES)


class IsSuperAdmin(BasePermission):
    """ADMIN only."""

    message = "Accès réservé à l'administrateur principal."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.ADMIN)
