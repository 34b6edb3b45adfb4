"""Challenge progression models"""
from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ChallengeCategory(str, Enum):
    """Challenge categories"""
    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"


class ChallengeStatus(str, Enum):
    """Where a challenge sits for the user"""
    LOCKED = "locked"
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"


class Challenge(BaseModel):
    """Static challenge definition"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: ChallengeCategory
    xp_reward: int = Field(gt=0)
    unlock_threshold_xp: int = Field(ge=0)

    def is_unlocked(self, category_xp: int) -> bool:
        return category_xp >= self.unlock_threshold_xp


class ActiveChallenge(BaseModel):
    """A challenge the user has started"""
    challenge_id: str
    category: ChallengeCategory
    started_at: datetime


class CompletedChallenge(BaseModel):
    """A finished challenge and the XP it awarded"""
    challenge_id: str
    category: ChallengeCategory
    xp_awarded: int
    completed_at: datetime


class ChallengeProgress(BaseModel):
    """Persisted challenge state"""
    active: list[ActiveChallenge] = Field(default_factory=list)
    completed: list[CompletedChallenge] = Field(default_factory=list)  # newest first
    category_xp: dict[str, int] = Field(default_factory=dict)

    def xp_for(self, category: ChallengeCategory) -> int:
        return self.category_xp.get(category.value, 0)

    def find_active(self, challenge_id: str) -> Optional[ActiveChallenge]:
        for entry in self.active:
            if entry.challenge_id == challenge_id:
                return entry
        return None

    def is_completed(self, challenge_id: str) -> bool:
        return any(entry.challenge_id == challenge_id for entry in self.completed)


class ChallengeView(BaseModel):
    """Read model for listing a category"""
    challenge: Challenge
    unlocked: bool
    status: ChallengeStatus
    unlocks_at: Optional[str] = None
