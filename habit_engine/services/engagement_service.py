"""
EngagementService - Habit Engine Facade

Wires the engine components to one StateStore, Clock and Notifier and is
the only surface a host (UI, CLI) talks to.

Error contract: components raise HabitEngineError subclasses; mutating
operations here catch them and hand back OperationResult.fail(...) so the
host never has to handle engine exceptions. Construction is the exception:
if the store can't be read, PersistenceUnavailable propagates, because an
engine silently running on defaults would overwrite the user's data.
"""

import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from habit_engine.config import RECENT_ACTIVITY_DAYS, REMINDER_TICK_SECONDS
from habit_engine.exceptions import HabitEngineError, ValidationError
from habit_engine.gamification.challenges import ChallengeProgression
from habit_engine.gamification.investment import PreferenceStore, investment_opportunities
from habit_engine.gamification.streak_system import CheckInStore, compute_current_streak
from habit_engine.gamification.trigger_engine import evaluate
from habit_engine.gamification.variable_rewards import RewardEngine
from habit_engine.gamification.xp_system import XPLedger
from habit_engine.models.checkin import StreakState
from habit_engine.models.reminder import Reminder
from habit_engine.models.result import OperationResult
from habit_engine.models.reward import RewardContext
from habit_engine.models.trigger import TriggerDecision
from habit_engine.models.user import InvestmentOpportunity, UserPreferences
from habit_engine.scheduler.notifier import LoggingNotifier, Notifier
from habit_engine.scheduler.reminder_manager import ReminderScheduler, ReminderTicker
from habit_engine.storage.base import StateStore
from habit_engine.utils.datetime_helpers import Clock

logger = logging.getLogger(__name__)


class EngagementService:
    """
    Host-facing API of the habit engine.

    Responsibilities:
    - Check-ins and streak summaries
    - Trigger evaluation
    - Reminder management and ticking
    - Reward inbox and claims (credits XP)
    - Challenge progression (credits XP)
    - Preferences and investment suggestions
    """

    def __init__(
        self,
        store: StateStore,
        clock: Clock,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
        recent_days: int = RECENT_ACTIVITY_DAYS
    ):
        """
        Load every entity from the store.

        Args:
            store: Persistence adapter
            clock: Source of "now" (timezone-aware)
            notifier: Reminder delivery (logs by default)
            rng: Random source for variable rewards
            recent_days: Length of the recent-activity bitmap

        Raises:
            PersistenceUnavailable: the store failed or holds invalid data
        """
        self.store = store
        self.clock = clock
        self.recent_days = recent_days

        self.preferences = PreferenceStore(store)
        self.checkins = CheckInStore(store, clock)
        self.reminders = ReminderScheduler(
            store,
            notifier or LoggingNotifier(),
            notifications_enabled=lambda: self.preferences.preferences.notifications,
        )
        self.rewards = RewardEngine(store, rng)
        self.challenges = ChallengeProgression(store)
        self.xp = XPLedger(store)
        logger.debug("EngagementService initialized")

    def _run(self, operation: str, action: Callable[[], Any]) -> OperationResult:
        """Run a mutating operation, turning engine errors into a failed result"""
        try:
            return OperationResult.ok(action())
        except HabitEngineError as e:
            logger.debug(f"{operation} failed with {e.__class__.__name__}")
            return OperationResult.fail(e)

    # ============================================
    # Check-ins & streaks
    # ============================================

    def record_check_in(self, now: Optional[datetime] = None) -> OperationResult:
        """Record today's check-in; value is the new StreakState"""
        return self._run(
            "record_check_in",
            lambda: self.checkins.record_check_in(now or self.clock.now()),
        )

    def get_streak_state(self) -> StreakState:
        return self.checkins.state

    def get_streak_summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Dashboard numbers for the consistency panel

        Returns:
            {
                'current_streak': int,
                'longest_streak': int,
                'last_check_in': date | None,
                'checked_in_today': bool,
                'recent_activity': list[bool],  # oldest first, ends today
                'next_milestone': int,
                'days_to_milestone': int,
                'message': str
            }
        """
        today = (now or self.clock.now()).date()
        return self.checkins.summary(today, self.recent_days)

    def evaluate_trigger(
        self,
        now: Optional[datetime] = None,
        last_activity: Optional[datetime] = None
    ) -> TriggerDecision:
        """
        Decide whether the host should prompt the user now

        last_activity defaults to the latest check-in.
        """
        history = self.checkins.state.history
        if last_activity is None and history:
            last_activity = history[0].timestamp
        return evaluate(history, last_activity, now or self.clock.now())

    # ============================================
    # Reminders
    # ============================================

    def list_reminders(self) -> List[Reminder]:
        return self.reminders.list_reminders()

    def save_reminder(self, reminder: Reminder | Dict[str, Any]) -> OperationResult:
        return self._run("save_reminder", lambda: self.reminders.save(reminder))

    def delete_reminder(self, reminder_id: int) -> OperationResult:
        return self._run("delete_reminder", lambda: self.reminders.delete(reminder_id))

    def toggle_reminder(self, reminder_id: int) -> OperationResult:
        return self._run("toggle_reminder", lambda: self.reminders.toggle(reminder_id))

    def tick_reminders(self, now: Optional[datetime] = None) -> List[Reminder]:
        """
        Fire reminders due this minute (none while notifications are off)

        Raises:
            PersistenceUnavailable: fired keys couldn't be saved
        """
        return self.reminders.tick(now or self.clock.now())

    def create_ticker(self, interval: float = REMINDER_TICK_SECONDS) -> ReminderTicker:
        """Background reminder loop bound to this engine's clock"""
        return ReminderTicker(self.reminders, self.clock, interval)

    # ============================================
    # Variable rewards
    # ============================================

    def check_for_rewards(
        self,
        context: Optional[RewardContext | Dict[str, Any]] = None,
        now: Optional[datetime] = None
    ) -> OperationResult:
        """
        Evaluate variable rewards and surface the winner in the inbox

        Streak length and interests default to the live streak and the
        user's preferences. Value is the AvailableReward or None.
        """
        now = now or self.clock.now()

        def action():
            ctx = context
            if isinstance(ctx, dict):
                ctx = self._validate_context(ctx)
            ctx = ctx or RewardContext()

            streak_length = ctx.streak_length
            if streak_length is None:
                streak_length = compute_current_streak(self.checkins.state.history, now.date())
            interests = ctx.user_interests
            if interests is None:
                interests = self.preferences.preferences.interests

            return self.rewards.check_for_rewards(streak_length, interests, now)

        return self._run("check_for_rewards", action)

    def claim_reward(self, reward_id: int, now: Optional[datetime] = None) -> OperationResult:
        """Claim an inbox reward; '+N XP' values credit the XP ledger"""
        now = now or self.clock.now()

        def action():
            claimed = self.rewards.claim(reward_id, now)
            if claimed.xp_gained:
                self.xp.award_xp(claimed.xp_gained, "reward", claimed.title)
            return claimed

        return self._run("claim_reward", action)

    def list_available_rewards(self):
        return self.rewards.available

    def list_claimed_rewards(self):
        return self.rewards.claimed

    # ============================================
    # Challenges
    # ============================================

    def list_challenges(self, category: str) -> OperationResult:
        """Value is a list of ChallengeView for the category"""
        return self._run("list_challenges", lambda: self.challenges.list_challenges(category))

    def start_challenge(self, challenge_id: str, now: Optional[datetime] = None) -> OperationResult:
        return self._run(
            "start_challenge",
            lambda: self.challenges.start(challenge_id, now or self.clock.now()),
        )

    def complete_challenge(self, challenge_id: str, now: Optional[datetime] = None) -> OperationResult:
        """Complete an active challenge; its XP also goes to the XP ledger"""
        now = now or self.clock.now()

        def action():
            completed = self.challenges.complete(challenge_id, now)
            self.xp.award_xp(completed.xp_awarded, "challenge", completed.challenge_id)
            return completed

        return self._run("complete_challenge", action)

    # ============================================
    # XP, preferences, investment
    # ============================================

    def get_xp(self) -> Dict[str, Any]:
        return self.xp.get_user_xp()

    def get_preferences(self) -> UserPreferences:
        return self.preferences.preferences

    def update_preferences(self, **changes) -> OperationResult:
        return self._run("update_preferences", lambda: self.preferences.update(**changes))

    def investment_opportunities(self) -> List[InvestmentOpportunity]:
        return investment_opportunities(
            has_set_preferences=self.preferences.preferences.has_completed_onboarding,
            has_set_reminders=self.reminders.customized,
        )

    @staticmethod
    def _validate_context(data: Dict[str, Any]) -> RewardContext:
        try:
            return RewardContext.model_validate(data)
        except ValueError as e:
            raise ValidationError(
                message=f"Invalid reward context: {e}",
                field="context",
                value=data,
                operation="check_for_rewards",
            )
