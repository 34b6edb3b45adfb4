"""
External Trigger Evaluation

Decides whether the host should prompt the user right now and with which
message class. Pure function of history and time; sending the prompt is the
host's job.

Decision order (first match wins):
1. reminder        - no history, or no activity today
2. missed_routine  - past the user's usual check-in time with no check-in today
3. milestone       - one day away from a streak milestone
4. nothing
"""

from typing import List, Optional
from datetime import datetime
import logging

from habit_engine.models.checkin import CheckInRecord
from habit_engine.models.trigger import TriggerDecision, TriggerKind
from habit_engine.gamification.streak_system import compute_current_streak
from habit_engine.utils.datetime_helpers import format_minutes_12h, minute_of_day

logger = logging.getLogger(__name__)

# One day before 5, 10, 25, 30 and 100
PRE_MILESTONE_STREAKS = {4, 9, 24, 29, 99}

# Need at least this many check-ins before guessing a routine
MIN_ROUTINE_SAMPLES = 3
ROUTINE_WINDOW = 5

REMINDER_MESSAGE = "Maintain your streak by checking in today."


def typical_check_in_minutes(history: List[CheckInRecord]) -> Optional[int]:
    """
    Average minute-of-day of the most recent check-ins

    Returns:
        Minute of day (0-1439), or None with too little history
    """
    if len(history) < MIN_ROUTINE_SAMPLES:
        return None

    recent = sorted(history, key=lambda r: r.timestamp, reverse=True)[:ROUTINE_WINDOW]
    total = sum(minute_of_day(record.timestamp) for record in recent)
    return total // len(recent)


def evaluate(
    history: List[CheckInRecord],
    last_activity: Optional[datetime],
    now: datetime
) -> TriggerDecision:
    """
    Evaluate external triggers

    Args:
        history: Check-in records (any order)
        last_activity: Last time the user engaged with the app, if known
        now: Current local time

    Returns:
        TriggerDecision
    """
    today = now.date()

    if not history or last_activity is None or last_activity.date() != today:
        return TriggerDecision(
            should_trigger=True,
            kind=TriggerKind.REMINDER,
            message=REMINDER_MESSAGE,
        )

    checked_in_today = any(record.date == today for record in history)
    usual = typical_check_in_minutes(history)
    if usual is not None and not checked_in_today and minute_of_day(now) > usual:
        usual_text = format_minutes_12h(usual)
        logger.debug(f"Missed routine: usual check-in {usual_text}, now {now:%H:%M}")
        return TriggerDecision(
            should_trigger=True,
            kind=TriggerKind.MISSED_ROUTINE,
            message=f"You usually check in around {usual_text}. Keep your streak going!",
        )

    current = compute_current_streak(history, today)
    if current in PRE_MILESTONE_STREAKS:
        return TriggerDecision(
            should_trigger=True,
            kind=TriggerKind.MILESTONE,
            message=f"You're just 1 day away from a {current + 1}-day streak milestone!",
        )

    return TriggerDecision(should_trigger=False)
