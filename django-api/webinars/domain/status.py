"""Webinar status derived from the clock.

The status is recomputed on every read and never stored. Both datetimes
must be timezone-aware (or both naive); calendar days and the daily
cutoff are evaluated in the timezone of ``now``.
"""

from datetime import datetime, time, timedelta

from webinars.domain.enums import WebinarGroup, WebinarStatus

# Registrations for a same-day session close at this local time.
REGISTRATION_CUTOFF = time(16, 0)

# PHARMIA runs a Tuesday live session with replays until Friday.
PHARMIA_REPLAY_DAYS = 3


def _in_clock_zone(date: datetime, now: datetime) -> datetime:
    if date.tzinfo is not None and now.tzinfo is not None:
        return date.astimezone(now.tzinfo)
    return date


def validity_end(date: datetime, group: WebinarGroup) -> datetime:
    """Last instant at which the webinar can still be sold or attended."""
    if group == WebinarGroup.PHARMIA:
        friday = date + timedelta(days=PHARMIA_REPLAY_DAYS)
        return friday.replace(hour=23, minute=59, second=59, microsecond=999999)
    return date


def is_expired(date: datetime, group: WebinarGroup, now: datetime) -> bool:
    return validity_end(_in_clock_zone(date, now), group) < now


def calculated_status(date: datetime, group: WebinarGroup, now: datetime) -> WebinarStatus:
    effective_end = validity_end(_in_clock_zone(date, now), group)
    event_day = effective_end.date()
    today = now.date()

    if event_day < today:
        return WebinarStatus.PAST
    if event_day > today:
        return WebinarStatus.UPCOMING

    if now.timetz().replace(tzinfo=None) < REGISTRATION_CUTOFF:
        return WebinarStatus.UPCOMING
    if now > effective_end:
        return WebinarStatus.LIVE
    return WebinarStatus.REGISTRATION_CLOSED
