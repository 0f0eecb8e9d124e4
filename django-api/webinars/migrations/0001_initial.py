import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="NewsletterMembership",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email", models.EmailField(max_length=254)),
                ("group_name", models.CharField(max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("email", "group_name"), name="unique_newsletter_membership"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Webinar",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("presenter", models.CharField(max_length=255)),
                ("date", models.DateTimeField()),
                (
                    "group",
                    models.CharField(
                        choices=[("CROP_TUNIS", "CROP_TUNIS"), ("PHARMIA", "PHARMIA"), ("MASTER_CLASS", "MASTER_CLASS")],
                        default="PHARMIA",
                        max_length=20,
                    ),
                ),
                ("price", models.DecimalField(decimal_places=3, default=0, max_digits=10)),
                ("meeting_link", models.CharField(blank=True, default="", max_length=500)),
                ("image_url", models.CharField(blank=True, default="", max_length=500)),
                (
                    "publication_status",
                    models.CharField(
                        choices=[("DRAFT", "DRAFT"), ("PUBLISHED", "PUBLISHED")],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                ("resources", models.JSONField(blank=True, default=list)),
                ("linked_content_ids", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date"],
                "indexes": [models.Index(fields=["group", "-date"], name="webinar_group_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="Attendee",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "PENDING"),
                            ("PAYMENT_SUBMITTED", "PAYMENT_SUBMITTED"),
                            ("CONFIRMED", "CONFIRMED"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("time_slots", models.JSONField(default=list)),
                ("proof_url", models.CharField(blank=True, default="", max_length=500)),
                ("used_credit", models.BooleanField(default=False)),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="webinar_registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "webinar",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendees",
                        to="webinars.webinar",
                    ),
                ),
            ],
            options={
                "ordering": ["registered_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("webinar", "user"), name="unique_attendee_per_webinar"),
                ],
            },
        ),
    ]
