"""
Variable Reward System

Builds a working set of reward candidates from the user's streak and
interests, drops candidates that would repeat the recent claim pattern, then
picks one by per-candidate probability with a uniform fallback.

Candidate order (and evaluation order):
- progress      always,                      p = 0.7
- streak        streak >= 3,                 p = min(0.1 * streak, 0.8)
- milestone     streak in {5, 10, 30, 100},  p = 0.9
- personalized  per matching interest,       p = 0.3
- surprise      5% chance per call,          p = 1.0
"""

import logging
import random
from datetime import datetime
from typing import List, Optional, Sequence

from habit_engine.exceptions import RewardNotFound
from habit_engine.models.reward import (
    AvailableReward,
    ClaimedReward,
    RewardCandidate,
    RewardsData,
    RewardType,
)
from habit_engine.storage.base import StateStore, REWARDS_KEY
from habit_engine.storage.entities import load_model, save_model

logger = logging.getLogger(__name__)

MILESTONE_STREAKS = {5, 10, 30, 100}
SURPRISE_CHANCE = 0.05
ANTI_REPEAT_WINDOW = 3
MAX_AVAILABLE_REWARDS = 10  # oldest unclaimed reward is dropped past this

PERSONALIZED_REWARDS = {
    "strength": RewardCandidate(
        type=RewardType.PERSONALIZED,
        title="STRENGTH PROTOCOL UNLOCKED",
        description="New advanced strength training methodology",
        value="CUSTOM PROGRAM",
        probability=0.3,
    ),
    "cardio": RewardCandidate(
        type=RewardType.PERSONALIZED,
        title="CARDIO EFFICIENCY MATRIX",
        description="Optimized heart rate zone calculations",
        value="HEART RATE ZONES",
        probability=0.3,
    ),
}


def build_candidates(
    streak_length: int,
    user_interests: Sequence[str],
    rng: random.Random
) -> List[RewardCandidate]:
    """Assemble the working set for one evaluation (draws the surprise roll)"""
    candidates = [
        RewardCandidate(
            type=RewardType.PROGRESS,
            title="EFFICIENCY BOOST",
            description="Your consistent effort is enhancing your results",
            value="+50 XP",
            probability=0.7,
        )
    ]

    if streak_length >= 3:
        candidates.append(RewardCandidate(
            type=RewardType.STREAK,
            title="MOMENTUM AMPLIFIER",
            description=f"{streak_length}-day streak achievement",
            value=f"+{streak_length * 10} XP",
            probability=min(0.1 * streak_length, 0.8),
        ))

    if streak_length in MILESTONE_STREAKS:
        candidates.append(RewardCandidate(
            type=RewardType.MILESTONE,
            title=f"{streak_length}-DAY THRESHOLD",
            description="You have reached a significant milestone",
            value="NEW FEATURE UNLOCKED",
            probability=0.9,
        ))

    interests = {interest.lower() for interest in user_interests}
    for interest, reward in PERSONALIZED_REWARDS.items():
        if interest in interests:
            candidates.append(reward.model_copy())

    if rng.random() < SURPRISE_CHANCE:
        candidates.append(RewardCandidate(
            type=RewardType.SURPRISE,
            title="SYSTEM UPGRADE",
            description="You have unlocked an unexpected enhancement",
            value="MYSTERY REWARD",
            probability=1.0,
        ))

    return candidates


def filter_recent_repeats(
    candidates: List[RewardCandidate],
    recent_claims: Sequence[ClaimedReward]
) -> List[RewardCandidate]:
    """
    Drop candidates whose type matches every one of the last 3 claims

    Only applies once there are 3 claims; shorter or mixed histories pass
    everything through.
    """
    window = [claim.type for claim in recent_claims[:ANTI_REPEAT_WINDOW]]
    if len(window) < ANTI_REPEAT_WINDOW:
        return list(candidates)
    return [c for c in candidates if not all(t == c.type for t in window)]


def evaluate_rewards(
    streak_length: int,
    user_interests: Sequence[str],
    recent_claims: Sequence[ClaimedReward],
    rng: Optional[random.Random] = None
) -> Optional[RewardCandidate]:
    """
    Pick a variable reward

    Args:
        streak_length: Current streak in days
        user_interests: Interest tags from preferences
        recent_claims: Claim log, newest first
        rng: Random source (module-level random if omitted)

    Returns:
        Selected candidate, or None if every candidate was filtered out
    """
    rng = rng or random.Random()

    candidates = filter_recent_repeats(
        build_candidates(streak_length, user_interests, rng),
        recent_claims,
    )
    if not candidates:
        return None

    for candidate in candidates:
        if rng.random() < candidate.probability:
            return candidate

    return rng.choice(candidates)


class RewardEngine:
    """Reward inbox (surfaced, unclaimed rewards) and append-only claim log"""

    def __init__(self, store: StateStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()
        self._data = load_model(store, REWARDS_KEY, RewardsData)

    @property
    def available(self) -> List[AvailableReward]:
        return list(self._data.available)

    @property
    def claimed(self) -> List[ClaimedReward]:
        return list(self._data.claimed)

    def check_for_rewards(
        self,
        streak_length: int,
        user_interests: Sequence[str],
        now: datetime
    ) -> Optional[AvailableReward]:
        """
        Evaluate rewards and put the winner in the inbox

        The inbox keeps the newest MAX_AVAILABLE_REWARDS unclaimed rewards.

        Returns:
            The surfaced reward, or None
        """
        candidate = evaluate_rewards(streak_length, user_interests, self._data.claimed, self.rng)
        if candidate is None:
            logger.info(f"No reward surfaced (streak {streak_length})")
            return None

        updated = self._data.model_copy(deep=True)
        reward = AvailableReward(
            **candidate.model_dump(),
            id=updated.next_id,
            generated_at=now,
        )
        updated.available.insert(0, reward)
        updated.next_id += 1
        expired = updated.available[MAX_AVAILABLE_REWARDS:]
        del updated.available[MAX_AVAILABLE_REWARDS:]
        self._commit(updated)

        if expired:
            logger.info(f"Inbox full, dropped unclaimed rewards {[r.id for r in expired]}")

        logger.info(f"Surfaced {reward.type.value} reward {reward.id}: {reward.title} ({reward.value})")
        return reward

    def claim(self, reward_id: int, now: datetime) -> ClaimedReward:
        """
        Move a reward from the inbox to the claim log

        Raises:
            RewardNotFound: id isn't in the inbox (never surfaced or already claimed)
            PersistenceUnavailable: save failed (nothing changed)
        """
        reward = next((r for r in self._data.available if r.id == reward_id), None)
        if reward is None:
            raise RewardNotFound(reward_id, operation="claim_reward")

        claimed = ClaimedReward(
            id=reward.id,
            type=reward.type,
            title=reward.title,
            value=reward.value,
            claimed_at=now,
            xp_gained=reward.xp_value,
        )

        updated = self._data.model_copy(deep=True)
        updated.available = [r for r in updated.available if r.id != reward_id]
        updated.claimed.insert(0, claimed)
        self._commit(updated)

        logger.info(f"Claimed reward {reward_id}: {claimed.title} (+{claimed.xp_gained} XP)")
        return claimed

    def _commit(self, updated: RewardsData) -> None:
        save_model(self.store, REWARDS_KEY, updated)
        self._data = updated
