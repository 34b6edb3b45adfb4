"""
Date/Time Handling Utilities

Centralizes the engine's notion of "now" and calendar days:
1. "Now" always comes from an injected Clock, never from datetime.now() in engine code
2. Calendar days are taken in the clock's timezone
3. Weekdays follow the dashboard convention: Sunday=0 ... Saturday=6
"""

import logging
from datetime import datetime, date, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


class Clock(Protocol):
    """Anything that can tell the engine what time it is"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in a fixed IANA timezone"""

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """Clock pinned to a given instant; advance() moves it forward"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant

    def advance(self, **delta) -> datetime:
        self.instant = self.instant + timedelta(**delta)
        return self.instant


def sunday_weekday(day: date) -> int:
    """Weekday with Sunday=0, Monday=1 ... Saturday=6"""
    return (day.weekday() + 1) % 7


def format_hhmm(dt: datetime) -> str:
    """24h "HH:MM" slot of a datetime"""
    return f"{dt.hour:02d}:{dt.minute:02d}"


def minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def format_minutes_12h(minutes: int) -> str:
    """Format minute-of-day as 'h:mm AM' (e.g., 427 -> '7:07 AM')"""
    hour, minute = divmod(minutes, 60)
    suffix = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"

