"""Unit tests for the webinar status resolver.

Run with: pytest tests/test_status.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from webinars.domain import WebinarGroup, WebinarStatus
from webinars.domain.status import calculated_status, is_expired, validity_end

TUNIS = timezone(timedelta(hours=1))


def at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, day, hour, minute, tzinfo=TUNIS)


class TestCalculatedStatus:
    """Tests for calculated_status on non-PHARMIA groups."""

    def test_future_day_is_upcoming(self):
        assert calculated_status(at(12, 9), WebinarGroup.CROP_TUNIS, at(10, 18)) == WebinarStatus.UPCOMING

    def test_previous_day_is_past(self):
        assert calculated_status(at(9, 20), WebinarGroup.CROP_TUNIS, at(10, 8)) == WebinarStatus.PAST

    def test_same_day_before_cutoff_is_upcoming(self):
        assert calculated_status(at(10, 20), WebinarGroup.MASTER_CLASS, at(10, 15, 59)) == WebinarStatus.UPCOMING

    def test_same_day_after_cutoff_closes_registration(self):
        assert (
            calculated_status(at(10, 20), WebinarGroup.MASTER_CLASS, at(10, 16))
            == WebinarStatus.REGISTRATION_CLOSED
        )

    def test_same_day_after_start_is_live(self):
        assert calculated_status(at(10, 17), WebinarGroup.CROP_TUNIS, at(10, 17, 30)) == WebinarStatus.LIVE

    def test_days_are_compared_in_clock_timezone(self):
        """23:30 UTC on the 9th is already the 10th in Tunis."""
        date = datetime(2026, 3, 9, 23, 30, tzinfo=timezone.utc)
        assert calculated_status(date, WebinarGroup.CROP_TUNIS, at(10, 9)) == WebinarStatus.UPCOMING


class TestPharmiaExtension:
    """PHARMIA sessions stay valid until the end of the Friday replay."""

    def test_validity_ends_three_days_later_at_midnight(self):
        end = validity_end(at(10, 19), WebinarGroup.PHARMIA)
        assert (end.day, end.hour, end.minute, end.second, end.microsecond) == (13, 23, 59, 59, 999999)

    def test_other_groups_end_at_their_date(self):
        assert validity_end(at(10, 19), WebinarGroup.CROP_TUNIS) == at(10, 19)

    @pytest.mark.parametrize(
        "now,expected",
        [
            (at(11, 12), WebinarStatus.UPCOMING),
            (at(13, 12), WebinarStatus.UPCOMING),
            (at(13, 17), WebinarStatus.REGISTRATION_CLOSED),
            (at(14, 0, 1), WebinarStatus.PAST),
        ],
    )
    def test_tuesday_session_through_friday(self, now, expected):
        assert calculated_status(at(10, 19), WebinarGroup.PHARMIA, now) == expected

    def test_expiry_uses_extension(self):
        tuesday = at(10, 19)
        assert not is_expired(tuesday, WebinarGroup.PHARMIA, at(13, 23))
        assert is_expired(tuesday, WebinarGroup.PHARMIA, at(14, 0, 1))
        assert is_expired(tuesday, WebinarGroup.CROP_TUNIS, at(10, 19, 1))
