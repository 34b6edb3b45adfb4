"""
Daily Check-In Streak Tracking

Turns check-in events into a consistency state:
- one check-in per calendar day (repeat calls the same day are rejected)
- current streak continues only from a check-in exactly yesterday
- longest streak never decreases
- fixed-length recent-activity bitmap for the consistency panel
- next-milestone lookup and motivational copy

Streak math only ever looks at day adjacency. The activity bitmap is
derived for display and is never fed back into the streak count.
"""

from typing import Dict, List, Optional
from datetime import date, datetime, timedelta
import logging

from habit_engine.exceptions import AlreadyCheckedInToday
from habit_engine.models.checkin import CheckInRecord, StreakState
from habit_engine.storage.base import StateStore, STREAK_KEY
from habit_engine.storage.entities import load_model, save_model
from habit_engine.utils.datetime_helpers import Clock

logger = logging.getLogger(__name__)

STREAK_MILESTONES = [3, 5, 7, 10, 14, 21, 30, 50, 100]


def apply_check_in(state: StreakState, now: datetime) -> StreakState:
    """
    Compute the streak state after a check-in at `now`

    Logic:
    - Already a record for today: reject
    - Previous check-in was yesterday: continue streak
    - Anything else (first check-in, gap): streak restarts at 1
    - Update longest_streak if current > longest

    Returns:
        New StreakState (the input is not modified)

    Raises:
        AlreadyCheckedInToday: a record exists for now's calendar day
    """
    today = now.date()

    if state.has_check_in_on(today):
        raise AlreadyCheckedInToday(today, operation="record_check_in")

    previous_day = state.history[0].date if state.history else None

    if previous_day is not None and previous_day == today - timedelta(days=1):
        current = state.current_streak + 1
    else:
        current = 1
        if previous_day is not None and state.current_streak > 1:
            gap_days = (today - previous_day).days
            logger.info(
                f"Streak broken. Was {state.current_streak}, gap was {gap_days} days"
            )

    record = CheckInRecord(date=today, timestamp=now)

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_check_in=today,
        history=sorted([record, *state.history], key=lambda r: r.date, reverse=True),
    )


def compute_current_streak(history: List[CheckInRecord], today: date) -> int:
    """
    Count consecutive check-in days walking backward from today

    A streak that ended yesterday is still alive (the user can check in
    later today), so the walk starts at yesterday when today is empty.
    """
    days = {record.date for record in history}
    if not days:
        return 0

    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)

    return streak


def recent_activity(history: List[CheckInRecord], today: date, days: int = 14) -> List[bool]:
    """
    Activity bitmap for the last `days` calendar days, oldest first

    The last element is today. Visualization only.
    """
    checked = {record.date for record in history}
    return [
        (today - timedelta(days=offset)) in checked
        for offset in range(days - 1, -1, -1)
    ]


def next_milestone(current_streak: int) -> Dict[str, int]:
    """
    Next streak milestone strictly above the current streak

    Returns:
        {'next': int, 'days_left': int}
    """
    for milestone in STREAK_MILESTONES:
        if current_streak < milestone:
            return {"next": milestone, "days_left": milestone - current_streak}

    # Past 100: every multiple of ten
    upcoming = (current_streak // 10 + 1) * 10
    return {"next": upcoming, "days_left": upcoming - current_streak}


def get_motivational_message(current_streak: int) -> str:
    """Headline for the consistency panel"""
    if current_streak == 0:
        return "Start your streak today"
    elif current_streak == 1:
        return "Solid start! Come back tomorrow to build your streak"
    elif current_streak < 5:
        days_left = next_milestone(current_streak)["days_left"]
        return f"Keep going! {days_left} days until your next milestone"
    elif current_streak < 10:
        return "Impressive consistency! You're building the habit"
    elif current_streak < 30:
        return "Outstanding dedication! The habit is forming"
    return "Elite consistency! Habit fully established"


class CheckInStore:
    """
    Owns the StreakState entity

    Loaded once on construction; every successful check-in is persisted
    before the in-memory state is replaced.
    """

    def __init__(self, store: StateStore, clock: Clock):
        self.store = store
        self.clock = clock
        self._state = load_model(store, STREAK_KEY, StreakState)

    @property
    def state(self) -> StreakState:
        return self._state

    def record_check_in(self, now: Optional[datetime] = None) -> StreakState:
        """
        Record today's check-in

        Raises:
            AlreadyCheckedInToday: today already has a record
            PersistenceUnavailable: save failed (state unchanged)
        """
        now = now or self.clock.now()
        old_current = self._state.current_streak

        updated = apply_check_in(self._state, now)
        save_model(self.store, STREAK_KEY, updated)
        self._state = updated

        logger.info(
            f"Recorded check-in for {now.date()}: "
            f"streak {old_current} → {updated.current_streak} days "
            f"(longest {updated.longest_streak})"
        )
        return updated

    def summary(self, today: date, days: int = 14) -> Dict[str, object]:
        """Streak numbers plus display helpers for the dashboard"""
        state = self._state
        current = compute_current_streak(state.history, today)
        milestone = next_milestone(current)
        return {
            "current_streak": current,
            "longest_streak": state.longest_streak,
            "last_check_in": state.last_check_in,
            "checked_in_today": state.has_check_in_on(today),
            "recent_activity": recent_activity(state.history, today, days),
            "next_milestone": milestone["next"],
            "days_to_milestone": milestone["days_left"],
            "message": get_motivational_message(current),
        }
