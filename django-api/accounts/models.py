"""User persistence model.

Carries the profile fields the webinar subsystem reads (phone number, role)
and the two credit balances it debits.
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models

from accounts.roles import ADMIN_ROLES, UserRole


class User(AbstractUser):
    """Platform user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=20,
        choices=[(role.value, role.label) for role in UserRole],
        default=UserRole.VISITEUR.value,
    )
    phone_number = models.CharField(max_length=32, blank=True, default="")
    master_class_credits = models.PositiveIntegerField(default=0)
    pharmia_credits = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return self.email

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
