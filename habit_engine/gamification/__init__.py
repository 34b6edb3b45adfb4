"""
Gamification core for the habit engine

This package turns check-ins into engagement:
- Daily check-in streaks and the consistency panel
- External trigger decisions
- Variable rewards with anti-repetition
- XP-gated challenge ladders
- XP and leveling
- Preferences and investment suggestions
"""

from habit_engine.gamification.streak_system import CheckInStore, apply_check_in, compute_current_streak
from habit_engine.gamification.trigger_engine import evaluate
from habit_engine.gamification.variable_rewards import RewardEngine, evaluate_rewards
from habit_engine.gamification.challenges import ChallengeProgression, get_challenge_by_id
from habit_engine.gamification.xp_system import XPLedger, calculate_level_from_xp
from habit_engine.gamification.investment import PreferenceStore, investment_opportunities

__all__ = [
    "CheckInStore",
    "apply_check_in",
    "compute_current_streak",
    "evaluate",
    "RewardEngine",
    "evaluate_rewards",
    "ChallengeProgression",
    "get_challenge_by_id",
    "XPLedger",
    "calculate_level_from_xp",
    "PreferenceStore",
    "investment_opportunities",
]
