"""Check-in and streak models"""
from datetime import date as dt_date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CheckInRecord(BaseModel):
    """A single daily check-in (immutable once created)"""
    model_config = ConfigDict(frozen=True)

    date: dt_date
    timestamp: datetime


class StreakState(BaseModel):
    """Consistency state derived from the check-in history"""
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_check_in: Optional[dt_date] = None
    history: list[CheckInRecord] = Field(default_factory=list)  # newest first

    @model_validator(mode="after")
    def validate_longest_covers_current(self) -> "StreakState":
        """Longest streak can never be shorter than the current one"""
        if self.longest_streak < self.current_streak:
            raise ValueError(
                f"longest_streak ({self.longest_streak}) must be >= "
                f"current_streak ({self.current_streak})"
            )
        return self

    def has_check_in_on(self, day: dt_date) -> bool:
        return any(record.date == day for record in self.history)
