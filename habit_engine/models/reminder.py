"""Reminder models"""
import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

_HHMM = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


def validate_hhmm(v: str) -> str:
    """Accept only zero-padded 24h "HH:MM" (00:00-23:59)"""
    if not _HHMM.fullmatch(v):
        raise ValueError(
            f"Invalid time format: '{v}'. Must be HH:MM (e.g., '07:00')"
        )
    return v


class Reminder(BaseModel):
    """Recurring weekday + time reminder

    Days use Sunday=0 ... Saturday=6. Title and days may be empty while a
    reminder is being edited; ReminderScheduler.save() rejects them.
    """
    id: Optional[int] = None  # assigned on first save
    title: str = ""
    description: Optional[str] = None
    time: str = "12:00"  # "HH:MM", local to the engine clock
    days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    enabled: bool = True
    last_triggered_key: Optional[str] = None  # "YYYY-MM-DDTHH:MM" of last fire

    @field_validator('time')
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        """Ensure HH:MM format and valid time"""
        return validate_hhmm(v)

    @field_validator('days')
    @classmethod
    def validate_days(cls, v: list[int]) -> list[int]:
        """Ensure days are 0-6 (Sunday-Saturday), deduplicated and sorted"""
        for day in v:
            if day < 0 or day > 6:
                raise ValueError(
                    f"Invalid day: {day}. Days must be 0-6 (Sunday=0, Saturday=6)"
                )
        return sorted(set(v))

    def trigger_key(self, day_iso: str) -> str:
        """Duplicate-suppression key for this reminder's slot on a given day"""
        return f"{day_iso}T{self.time}"


class ReminderSet(BaseModel):
    """Persisted reminder collection"""
    reminders: list[Reminder] = Field(default_factory=list)
    customized: bool = False  # True once the user saved, toggled or deleted anything

    def find(self, reminder_id: int) -> Optional[Reminder]:
        for reminder in self.reminders:
            if reminder.id == reminder_id:
                return reminder
        return None

    def next_id(self) -> int:
        return max((r.id or 0 for r in self.reminders), default=0) + 1
