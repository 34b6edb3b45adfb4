"""
Challenge Progression

Each category has an ordered ladder of challenges. A challenge unlocks once
the user's cumulative XP in that category reaches its threshold; completing
a challenge adds its XP to the category, which can unlock the next rungs.
Unlocking is monotonic because category XP only ever grows.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from habit_engine.exceptions import InvalidChallengeState
from habit_engine.models.challenge import (
    ActiveChallenge,
    Challenge,
    ChallengeCategory,
    ChallengeProgress,
    ChallengeStatus,
    ChallengeView,
    CompletedChallenge,
)
from habit_engine.storage.base import StateStore, CHALLENGES_KEY
from habit_engine.storage.entities import load_model, save_model

logger = logging.getLogger(__name__)


# ============================================
# Challenge Library
# ============================================

def _ladder(category: ChallengeCategory, prefix: str, rungs: List[tuple]) -> List[Challenge]:
    return [
        Challenge(
            id=f"{prefix}_{index}",
            name=name,
            description=description,
            category=category,
            xp_reward=xp_reward,
            unlock_threshold_xp=threshold,
        )
        for index, (name, description, xp_reward, threshold) in enumerate(rungs, start=1)
    ]


CHALLENGE_LIBRARY: Dict[ChallengeCategory, List[Challenge]] = {
    ChallengeCategory.STRENGTH: _ladder(ChallengeCategory.STRENGTH, "strength", [
        ("FOUNDATIONAL STRENGTH", "Complete 3 sets of 10 bodyweight squats", 50, 0),
        ("STRENGTH PROGRESSION I", "Complete 3 sets of 15 bodyweight squats", 100, 50),
        ("STRENGTH PROGRESSION II", "Complete 3 sets of 10 weighted squats (25% bodyweight)", 150, 150),
        ("ADVANCED STRENGTH I", "Complete 3 sets of 8 weighted squats (50% bodyweight)", 200, 300),
        ("ELITE STRENGTH", "Complete 3 sets of 5 weighted squats (100% bodyweight)", 300, 500),
    ]),
    ChallengeCategory.CARDIO: _ladder(ChallengeCategory.CARDIO, "cardio", [
        ("CARDIOVASCULAR BASE", "Complete a 1 mile run/walk without stopping", 50, 0),
        ("CARDIO EFFICIENCY I", "Complete a 2 mile run in under 20 minutes", 100, 50),
        ("CARDIO EFFICIENCY II", "Complete a 5K run in under 30 minutes", 150, 150),
        ("ADVANCED CARDIO", "Complete a 10K run in under 60 minutes", 200, 300),
        ("ELITE CARDIO", "Complete a half marathon", 300, 500),
    ]),
    ChallengeCategory.FLEXIBILITY: _ladder(ChallengeCategory.FLEXIBILITY, "flex", [
        ("MOBILITY FOUNDATION", "Touch your toes while keeping legs straight", 50, 0),
        ("FLEXIBILITY PROGRESS I", "Hold a proper squat position for 30 seconds", 100, 50),
        ("FLEXIBILITY PROGRESS II", "Perform a seated forward bend (head to knees)", 150, 150),
        ("ADVANCED FLEXIBILITY", "Hold a proper downward dog position for 60 seconds", 200, 300),
        ("ELITE FLEXIBILITY", "Perform a full side split", 300, 500),
    ]),
}


def get_challenge_by_id(challenge_id: str) -> Optional[Challenge]:
    """
    Get a specific challenge by ID

    Returns:
        Challenge if found, None otherwise
    """
    for ladder in CHALLENGE_LIBRARY.values():
        for challenge in ladder:
            if challenge.id == challenge_id:
                return challenge
    return None


def parse_category(category: str | ChallengeCategory) -> ChallengeCategory:
    """Resolve a category name, rejecting unknown ones"""
    try:
        return ChallengeCategory(category)
    except ValueError:
        raise InvalidChallengeState(f"Unknown challenge category '{category}'")


def unlocked_challenges(category: ChallengeCategory, category_xp: int) -> List[Challenge]:
    """Challenges in a category whose threshold the XP reaches"""
    return [c for c in CHALLENGE_LIBRARY[category] if c.is_unlocked(category_xp)]


class ChallengeProgression:
    """Active / completed challenges and cumulative XP per category"""

    def __init__(self, store: StateStore):
        self.store = store
        self._progress = load_model(store, CHALLENGES_KEY, ChallengeProgress)

    @property
    def progress(self) -> ChallengeProgress:
        return self._progress

    def category_xp(self, category: str | ChallengeCategory) -> int:
        return self._progress.xp_for(parse_category(category))

    def list_challenges(self, category: str | ChallengeCategory) -> List[ChallengeView]:
        """
        Challenges of a category with their lock state

        Raises:
            InvalidChallengeState: unknown category
        """
        category = parse_category(category)
        xp = self._progress.xp_for(category)

        views = []
        for challenge in CHALLENGE_LIBRARY[category]:
            unlocked = challenge.is_unlocked(xp)
            if self._progress.is_completed(challenge.id):
                status = ChallengeStatus.COMPLETED
            elif self._progress.find_active(challenge.id):
                status = ChallengeStatus.ACTIVE
            elif unlocked:
                status = ChallengeStatus.AVAILABLE
            else:
                status = ChallengeStatus.LOCKED

            views.append(ChallengeView(
                challenge=challenge,
                unlocked=unlocked,
                status=status,
                unlocks_at=None if unlocked else (
                    f"Requires {challenge.unlock_threshold_xp} {category.value} XP"
                ),
            ))
        return views

    def start(self, challenge_id: str, now: datetime) -> ActiveChallenge:
        """
        Move an unlocked challenge into the active set (no XP change)

        Raises:
            InvalidChallengeState: unknown, locked, already active or completed
        """
        challenge = self._require(challenge_id, "start")
        xp = self._progress.xp_for(challenge.category)

        if not challenge.is_unlocked(xp):
            raise InvalidChallengeState(
                f"Challenge '{challenge_id}' is locked ({xp}/{challenge.unlock_threshold_xp} XP)",
                challenge_id=challenge_id,
                operation="start_challenge",
            )
        if self._progress.find_active(challenge_id):
            raise InvalidChallengeState(
                f"Challenge '{challenge_id}' is already active",
                challenge_id=challenge_id,
                operation="start_challenge",
            )
        if self._progress.is_completed(challenge_id):
            raise InvalidChallengeState(
                f"Challenge '{challenge_id}' is already completed",
                challenge_id=challenge_id,
                operation="start_challenge",
            )

        active = ActiveChallenge(
            challenge_id=challenge.id,
            category=challenge.category,
            started_at=now,
        )
        updated = self._progress.model_copy(deep=True)
        updated.active.insert(0, active)
        self._commit(updated)

        logger.info(f"Started challenge {challenge.id} ({challenge.name})")
        return active

    def complete(self, challenge_id: str, now: datetime) -> CompletedChallenge:
        """
        Finish an active challenge and credit its XP to the category

        Raises:
            InvalidChallengeState: never started, or already completed
        """
        challenge = self._require(challenge_id, "complete")

        if self._progress.find_active(challenge_id) is None:
            state = "already completed" if self._progress.is_completed(challenge_id) else "not active"
            raise InvalidChallengeState(
                f"Challenge '{challenge_id}' is {state}",
                challenge_id=challenge_id,
                operation="complete_challenge",
            )

        completed = CompletedChallenge(
            challenge_id=challenge.id,
            category=challenge.category,
            xp_awarded=challenge.xp_reward,
            completed_at=now,
        )
        updated = self._progress.model_copy(deep=True)
        updated.active = [a for a in updated.active if a.challenge_id != challenge_id]
        updated.completed.insert(0, completed)
        key = challenge.category.value
        old_xp = updated.category_xp.get(key, 0)
        updated.category_xp[key] = old_xp + challenge.xp_reward
        self._commit(updated)

        previously_unlocked = {c.id for c in unlocked_challenges(challenge.category, old_xp)}
        newly_unlocked = [
            c.id for c in unlocked_challenges(challenge.category, updated.category_xp[key])
            if c.id not in previously_unlocked
        ]
        logger.info(
            f"Completed challenge {challenge.id}: +{challenge.xp_reward} {key} XP "
            f"({old_xp} → {updated.category_xp[key]})"
            + (f", unlocked {', '.join(newly_unlocked)}" if newly_unlocked else "")
        )
        return completed

    def _require(self, challenge_id: str, action: str) -> Challenge:
        challenge = get_challenge_by_id(challenge_id)
        if challenge is None:
            raise InvalidChallengeState(
                f"Challenge '{challenge_id}' not found",
                challenge_id=challenge_id,
                operation=f"{action}_challenge",
            )
        return challenge

    def _commit(self, updated: ChallengeProgress) -> None:
        save_model(self.store, CHALLENGES_KEY, updated)
        self._progress = updated
