"""Serializers for transforming domain models to API payloads and back.

Output keys are camelCase. Input serializers only check shape; business
rules (slots, phone, credits) are enforced by the services.
"""

from decimal import Decimal
from typing import Any

from rest_framework import serializers

from webinars.domain import (
    CreditPool,
    Money,
    PublicationStatus,
    WebinarDraft,
    WebinarGroup,
)


def _values(enum) -> list[str]:
    return [member.value for member in enum]


# ----------------------------------------------------------------------
# Output
# ----------------------------------------------------------------------


class ResourceSerializer(serializers.Serializer):
    type = serializers.CharField()
    title = serializers.CharField()
    source = serializers.CharField()


class AccountSerializer(serializers.Serializer):
    """User summary returned after registration and in attendee lists."""

    id = serializers.CharField()
    email = serializers.EmailField()
    firstName = serializers.CharField(source="first_name")
    lastName = serializers.CharField(source="last_name")
    role = serializers.CharField()
    phoneNumber = serializers.CharField(source="phone_number")
    masterClassCredits = serializers.IntegerField(source="master_class_credits")
    pharmiaCredits = serializers.IntegerField(source="pharmia_credits")


class AttendeeSerializer(serializers.Serializer):
    """Serializer for AttendeeView (admin payloads only)."""

    userId = serializers.CharField(source="attendee.user_id")
    status = serializers.CharField(source="attendee.status")
    timeSlots = serializers.ListField(child=serializers.CharField(), source="attendee.time_slots")
    proofUrl = serializers.CharField(source="attendee.proof_url", allow_null=True)
    usedCredit = serializers.BooleanField(source="attendee.used_credit")
    registeredAt = serializers.DateTimeField(source="attendee.registered_at")
    user = AccountSerializer(source="account", allow_null=True)


class WebinarSerializer(serializers.Serializer):
    """Serializer for WebinarView.

    googleMeetLink and attendees are only emitted when the view carries them.
    """

    id = serializers.CharField(source="webinar.id")
    title = serializers.CharField(source="webinar.title")
    description = serializers.CharField(source="webinar.description")
    presenter = serializers.CharField(source="webinar.presenter")
    date = serializers.DateTimeField(source="webinar.date")
    group = serializers.CharField(source="webinar.group")
    price = serializers.DecimalField(
        source="webinar.price.amount", max_digits=10, decimal_places=3, coerce_to_string=False
    )
    imageUrl = serializers.CharField(source="webinar.image_url", allow_null=True)
    publicationStatus = serializers.CharField(source="webinar.publication_status")
    resources = ResourceSerializer(source="webinar.resources", many=True)
    linkedContentIds = serializers.ListField(child=serializers.CharField(), source="webinar.linked_content_ids")
    createdAt = serializers.DateTimeField(source="webinar.created_at")
    updatedAt = serializers.DateTimeField(source="webinar.updated_at")
    calculatedStatus = serializers.CharField(source="calculated_status")
    isRegistered = serializers.BooleanField(source="is_registered")
    registrationStatus = serializers.CharField(source="registration_status", allow_null=True)

    def to_representation(self, instance) -> dict[str, Any]:
        data = super().to_representation(instance)
        if instance.meeting_link:
            data["googleMeetLink"] = instance.meeting_link
        if instance.attendees is not None:
            data["attendees"] = AttendeeSerializer(instance.attendees, many=True).data
        return data


class CatalogWebinarSerializer(serializers.Serializer):
    """Public projection used by the cart: no attendees, no link."""

    id = serializers.CharField(source="webinar.id")
    title = serializers.CharField(source="webinar.title")
    description = serializers.CharField(source="webinar.description")
    presenter = serializers.CharField(source="webinar.presenter")
    date = serializers.DateTimeField(source="webinar.date")
    group = serializers.CharField(source="webinar.group")
    price = serializers.DecimalField(
        source="webinar.price.amount", max_digits=10, decimal_places=3, coerce_to_string=False
    )
    imageUrl = serializers.CharField(source="webinar.image_url", allow_null=True)
    calculatedStatus = serializers.CharField(source="calculated_status")


class AttendeeRecordSerializer(serializers.Serializer):
    """A freshly inserted attendee, as returned to the registrant."""

    userId = serializers.CharField(source="user_id")
    status = serializers.CharField()
    timeSlots = serializers.ListField(child=serializers.CharField(), source="time_slots")
    usedCredit = serializers.BooleanField(source="used_credit")
    registeredAt = serializers.DateTimeField(source="registered_at")


# ----------------------------------------------------------------------
# Input
# ----------------------------------------------------------------------


class RegisterSerializer(serializers.Serializer):
    timeSlots = serializers.ListField(child=serializers.CharField(), required=False, allow_empty=True)
    useCredit = serializers.BooleanField(required=False, default=False)


class PublicRegisterSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=150)
    lastName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    timeSlots = serializers.ListField(child=serializers.CharField(), required=False, allow_empty=True)


class ProofSerializer(serializers.Serializer):
    proofUrl = serializers.CharField(max_length=500)


class SlotsSerializer(serializers.Serializer):
    newSlots = serializers.ListField(child=serializers.CharField(), required=False, allow_empty=True)


class AddAttendeeSerializer(serializers.Serializer):
    userId = serializers.CharField()
    timeSlots = serializers.ListField(child=serializers.CharField(), required=False, allow_empty=True)


class ResourcesSerializer(serializers.Serializer):
    resources = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class CreditTopUpSerializer(serializers.Serializer):
    pool = serializers.ChoiceField(choices=_values(CreditPool))
    amount = serializers.IntegerField(min_value=1)


class WebinarWriteSerializer(serializers.Serializer):
    """Admin create/update payload. Use partial=True for updates."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    presenter = serializers.CharField(max_length=255)
    date = serializers.DateTimeField()
    group = serializers.ChoiceField(choices=_values(WebinarGroup), required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal("0"), required=False)
    publicationStatus = serializers.ChoiceField(
        choices=_values(PublicationStatus), source="publication_status", required=False
    )
    googleMeetLink = serializers.CharField(
        source="meeting_link", allow_blank=True, allow_null=True, required=False, max_length=500
    )
    imageUrl = serializers.CharField(source="image_url", allow_blank=True, allow_null=True, required=False, max_length=500)
    linkedContentIds = serializers.ListField(
        child=serializers.CharField(), source="linked_content_ids", required=False
    )

    def to_changes(self) -> dict[str, Any]:
        """Validated data keyed by domain field, with domain types."""
        changes = dict(self.validated_data)
        if "group" in changes:
            changes["group"] = WebinarGroup(changes["group"])
        if "price" in changes:
            changes["price"] = Money(amount=changes["price"])
        if "publication_status" in changes:
            changes["publication_status"] = PublicationStatus(changes["publication_status"])
        if "linked_content_ids" in changes:
            changes["linked_content_ids"] = tuple(changes["linked_content_ids"])
        return changes

    def to_draft(self) -> WebinarDraft:
        return WebinarDraft(**self.to_changes())
