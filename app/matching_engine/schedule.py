"""
Event schedule helpers — the single "has this event ended?" check.

Rankings open only once an event is over.  The API layer computes the
flag here and hands it to the ledger, which trusts it.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Protocol


class ScheduledEvent(Protocol):
    event_date: date
    end_time: datetime | None
    schedule_end: str | None


def _parse_hhmm(value: str | None) -> time | None:
    """Parse "HH:MM" (or "H:MM"); anything else yields None."""
    if not value:
        return None
    hours, _, minutes = value.strip().partition(":")
    try:
        h = int(hours)
        m = int(minutes) if minutes else 0
        return time(hour=h, minute=m)
    except ValueError:
        return None


def event_end_time(event: ScheduledEvent, tz: tzinfo = timezone.utc) -> datetime | None:
    """
    Resolve when *event* ends.

    An explicit ``end_time`` wins; otherwise ``schedule_end`` is applied
    to ``event_date`` in *tz*.  Returns None when neither is usable.
    """
    if event.end_time is not None:
        end = event.end_time
        return end if end.tzinfo else end.replace(tzinfo=tz)

    end_of_schedule = _parse_hhmm(event.schedule_end)
    if end_of_schedule is not None:
        return datetime.combine(event.event_date, end_of_schedule, tzinfo=tz)

    return None


def has_event_ended(
    event: ScheduledEvent,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
) -> bool:
    """
    True once *event* is over.

    Without any end time the event counts as ended from the day after
    ``event_date``.  A naive *now* is read in *tz*, like a naive
    ``end_time``.
    """
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    end = event_end_time(event, tz)
    if end is not None:
        return now >= end
    return event.event_date < now.astimezone(tz).date()
