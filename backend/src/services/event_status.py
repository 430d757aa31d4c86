"""
Event status engine.

Pure functions deciding an event's lifecycle status from its calendar date,
the current time and the sticky cancelled override. Nothing here touches the
database; write paths in EventService decide when a computed status is
persisted.

All comparisons use naive datetimes in the configured event timezone
(CAMPUS_EVENTS_TIMEZONE). Aware datetimes are converted first.
"""

from datetime import date, datetime, time
from typing import Optional, Tuple

from backend.src.config.settings import get_settings
from backend.src.models.event import EventStatus


# Last representable instant of a day at millisecond precision
END_OF_DAY = time(23, 59, 59, 999000)


def current_time() -> datetime:
    """Wall-clock now in the event timezone, as a naive datetime."""
    return datetime.now(get_settings().tz).replace(tzinfo=None)


def to_event_local(now: datetime) -> datetime:
    """Normalize ``now`` to a naive datetime in the event timezone."""
    if now.tzinfo is None:
        return now
    return now.astimezone(get_settings().tz).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return (00:00:00.000, 23:59:59.999) for the given calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)


def _stored_status(event) -> Optional[EventStatus]:
    value = getattr(event, "status", None)
    if value is None:
        return None
    if isinstance(value, EventStatus):
        return value
    return EventStatus(value)


def compute_status(event, now: datetime) -> EventStatus:
    """
    Compute the lifecycle status of an event at ``now``.

    Rules, first match wins:
    1. Stored status cancelled -> cancelled (sticky override)
    2. now after the event day -> completed
    3. now within the event day -> ongoing
    4. event day starts after today's start -> upcoming

    When none of the rules match the stored status is returned unchanged.
    With calendar-date arithmetic rule 4 always matches once 2 and 3 fail,
    so this fallback is only reachable through inconsistent clocks.

    Args:
        event: Object exposing ``status`` and ``event_date``
        now: Current time (naive event-local or aware)

    Returns:
        The computed EventStatus. The event is not modified.
    """
    stored = _stored_status(event)
    if stored is EventStatus.CANCELLED:
        return EventStatus.CANCELLED

    now = to_event_local(now)
    day_start, day_end = day_bounds(event.event_date)
    today_start, _ = day_bounds(now.date())

    if now > day_end:
        return EventStatus.COMPLETED
    if day_start <= now <= day_end:
        return EventStatus.ONGOING
    if day_start > today_start:
        return EventStatus.UPCOMING

    return stored or EventStatus.UPCOMING


def refresh_status(event, now: datetime) -> bool:
    """
    Assign the computed status to the in-memory event.

    Used by write paths only. Returns True if the stored value changed.
    """
    computed = compute_status(event, now)
    if event.status == computed.value:
        return False
    event.status = computed.value
    return True


def registration_deadline_passed(event, now: datetime) -> bool:
    """True if the event has a registration deadline and its day is over."""
    if event.registration_deadline is None:
        return False
    _, deadline_end = day_bounds(event.registration_deadline)
    return to_event_local(now) > deadline_end


def is_registration_open(event, now: datetime) -> bool:
    """
    Check whether the event currently accepts registrations.

    Recomputes the status first. Open means: status is upcoming, the event
    is not full, and the registration deadline (if any) has not passed.
    The event is not modified.
    """
    if compute_status(event, now) is not EventStatus.UPCOMING:
        return False
    if len(event.participants) >= event.max_participants:
        return False
    return not registration_deadline_passed(event, now)
