"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.conf import settings
from django.db import models

from webinars.domain.enums import AttendeeStatus, PublicationStatus, WebinarGroup


def _choices(enum) -> list[tuple[str, str]]:
    return [(member.value, member.value) for member in enum]


class Webinar(models.Model):
    """Persistence model for webinars."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    presenter = models.CharField(max_length=255)
    date = models.DateTimeField()
    group = models.CharField(max_length=20, choices=_choices(WebinarGroup), default=WebinarGroup.PHARMIA.value)
    price = models.DecimalField(max_digits=10, decimal_places=3, default=0)
    meeting_link = models.CharField(max_length=500, blank=True, default="")
    image_url = models.CharField(max_length=500, blank=True, default="")
    publication_status = models.CharField(
        max_length=20,
        choices=_choices(PublicationStatus),
        default=PublicationStatus.DRAFT.value,
    )
    resources = models.JSONField(default=list, blank=True)
    linked_content_ids = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        indexes = [
            models.Index(fields=["group", "-date"], name="webinar_group_date_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class Attendee(models.Model):
    """Persistence model for a user's registration to a webinar."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    webinar = models.ForeignKey(Webinar, on_delete=models.CASCADE, related_name="attendees")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="webinar_registrations",
    )
    status = models.CharField(
        max_length=20,
        choices=_choices(AttendeeStatus),
        default=AttendeeStatus.PENDING.value,
    )
    time_slots = models.JSONField(default=list)
    proof_url = models.CharField(max_length=500, blank=True, default="")
    used_credit = models.BooleanField(default=False)
    registered_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["registered_at"]
        constraints = [
            models.UniqueConstraint(fields=["webinar", "user"], name="unique_attendee_per_webinar"),
        ]

    def __str__(self) -> str:
        return f"{self.webinar.title} - {self.user_id} ({self.status})"


class NewsletterMembership(models.Model):
    """An email subscribed to a newsletter group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField()
    group_name = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["email", "group_name"], name="unique_newsletter_membership"),
        ]

    def __str__(self) -> str:
        return f"{self.email} - {self.group_name}"
