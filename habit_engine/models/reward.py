"""Variable reward models"""
import re
from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

_XP_VALUE = re.compile(r"\+(\d+)\s*XP", re.IGNORECASE)


class RewardType(str, Enum):
    """Reward categories, in catalog evaluation order"""
    PROGRESS = "progress"
    STREAK = "streak"
    MILESTONE = "milestone"
    PERSONALIZED = "personalized"
    SURPRISE = "surprise"


class RewardCandidate(BaseModel):
    """Catalog entry considered by RewardEngine.evaluate_rewards()"""
    type: RewardType
    title: str
    description: str
    value: str
    probability: float = Field(ge=0.0, le=1.0)

    @property
    def xp_value(self) -> int:
        """XP carried by values like '+50 XP', 0 otherwise"""
        match = _XP_VALUE.search(self.value)
        return int(match.group(1)) if match else 0


class AvailableReward(RewardCandidate):
    """A candidate surfaced to the user and waiting to be claimed"""
    id: int
    generated_at: datetime


class ClaimedReward(BaseModel):
    """Append-only claim log entry"""
    id: int
    type: RewardType
    title: str
    value: str = ""
    claimed_at: datetime
    xp_gained: int = 0


class RewardContext(BaseModel):
    """Inputs for a reward check; missing fields come from engine state"""
    streak_length: Optional[int] = Field(default=None, ge=0)
    user_interests: Optional[list[str]] = None


class RewardsData(BaseModel):
    """Persisted reward inbox and claim log"""
    available: list[AvailableReward] = Field(default_factory=list)  # newest first
    claimed: list[ClaimedReward] = Field(default_factory=list)  # newest first
    next_id: int = 1
