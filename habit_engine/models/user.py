"""User preference and XP models"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from habit_engine.models.reminder import validate_hhmm


class UserPreferences(BaseModel):
    """Investment data the user has given us"""
    interests: list[str] = Field(default_factory=list)  # strength, cardio, nutrition...
    preferred_check_in_time: Optional[str] = None  # "HH:MM", shown to the host only
    goal_categories: list[str] = Field(default_factory=list)
    notifications: bool = True  # False mutes reminder ticks
    has_completed_onboarding: bool = False

    @field_validator('interests', 'goal_categories')
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Lowercase, strip and drop blanks"""
        return [tag.strip().lower() for tag in v if tag and tag.strip()]

    @field_validator('preferred_check_in_time')
    @classmethod
    def validate_time_format(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            validate_hhmm(v)
        return v


class XPState(BaseModel):
    """Persisted XP total; level info is derived"""
    total_xp: int = Field(default=0, ge=0)


class InvestmentOpportunity(BaseModel):
    """Suggestion that raises the user's stake in the app"""
    type: str  # personalize, reminders, challenge
    title: str
    description: str
    benefit: str
    action: str
