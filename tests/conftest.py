"""Global test fixtures and utilities for habit-engine tests"""
import random
import pytest
from datetime import datetime, date, timedelta
from zoneinfo import ZoneInfo

from habit_engine.models.checkin import CheckInRecord, StreakState
from habit_engine.services.engagement_service import EngagementService
from habit_engine.storage.memory_store import InMemoryStore
from habit_engine.utils.datetime_helpers import FixedClock

UTC = ZoneInfo("UTC")


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Monday, 15 January 2024"""
    return date(2024, 1, 15)


@pytest.fixture
def now(today):
    """09:00 UTC on the test day"""
    return datetime(today.year, today.month, today.day, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock(now):
    return FixedClock(now)


# ============================================================================
# Collaborator Fixtures
# ============================================================================

class RecordingNotifier:
    """Notifier that keeps every (title, body) it was asked to send"""

    def __init__(self):
        self.sent = []

    def send(self, title, body):
        self.sent.append((title, body))


class FailingStore(InMemoryStore):
    """In-memory store whose saves can be switched off"""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_saves = False
        self.fail_loads = False

    def load(self, key):
        if self.fail_loads:
            raise OSError("disk unavailable")
        return super().load(key)

    def save(self, key, blob):
        if self.fail_saves:
            raise OSError("disk full")
        super().save(key, blob)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def rng():
    """Seeded random source so reward draws are reproducible"""
    return random.Random(1234)


@pytest.fixture
def service(store, clock, notifier, rng):
    return EngagementService(store=store, clock=clock, notifier=notifier, rng=rng)


# ============================================================================
# History Helpers
# ============================================================================

@pytest.fixture
def make_history(today):
    """
    Build check-in records from day offsets relative to today

    make_history([1, 2, 3]) -> check-ins yesterday and the two days before,
    newest first, each at 08:00 unless given `at=(hour, minute)`.
    """
    def _make(offsets, at=(8, 0)):
        records = []
        for offset in sorted(offsets):
            day = today - timedelta(days=offset)
            records.append(CheckInRecord(
                date=day,
                timestamp=datetime(day.year, day.month, day.day, at[0], at[1], tzinfo=UTC),
            ))
        return records
    return _make


@pytest.fixture
def make_streak_state(make_history):
    """StreakState whose counters match a consecutive history"""
    def _make(offsets, current=None, longest=None, at=(8, 0)):
        history = make_history(offsets, at=at)
        current = len(history) if current is None else current
        return StreakState(
            current_streak=current,
            longest_streak=max(current, longest or 0),
            last_check_in=history[0].date if history else None,
            history=history,
        )
    return _make
