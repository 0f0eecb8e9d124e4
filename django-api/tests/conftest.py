"""Pytest configuration and shared fixtures."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from accounts.roles import UserRole
from accounts.tokens import issue_session_token
from webinars import models as orm


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def inline_notifications(settings):
    """Send confirmation emails synchronously so tests can read mail.outbox."""
    settings.PHARMIA_ASYNC_NOTIFICATIONS = False


@pytest.fixture
def make_user(db):
    def _make(role: UserRole = UserRole.PHARMACIEN, **fields) -> User:
        fields.setdefault("email", f"{uuid.uuid4().hex[:10]}@example.tn")
        fields.setdefault("phone_number", "22123456")
        return User.objects.create_user(username=uuid.uuid4().hex, role=role.value, **fields)

    return _make


@pytest.fixture
def client_for():
    """APIClient authenticated with a session token for the given user."""

    def _client(user: User) -> APIClient:
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_session_token(str(user.id), user.role)}")
        return client

    return _client


@pytest.fixture
def make_webinar(db):
    def _make(**fields) -> orm.Webinar:
        fields.setdefault("title", "Prise en charge du diabète")
        fields.setdefault("description", "Conseils officinaux.")
        fields.setdefault("presenter", "Dr. Ben Salah")
        fields.setdefault("date", timezone.now() + timedelta(days=7))
        fields.setdefault("group", "CROP_TUNIS")
        fields.setdefault("price", Decimal("80.000"))
        fields.setdefault("publication_status", "PUBLISHED")
        fields.setdefault("meeting_link", "https://meet.google.com/abc-defg-hij")
        return orm.Webinar.objects.create(**fields)

    return _make


@pytest.fixture
def add_attendee(db):
    def _add(webinar: orm.Webinar, user: User, status: str = "CONFIRMED", **fields) -> orm.Attendee:
        fields.setdefault("time_slots", ["MORNING"])
        return orm.Attendee.objects.create(webinar=webinar, user=user, status=status, **fields)

    return _add
