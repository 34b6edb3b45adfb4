"""Trigger decision models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class TriggerKind(str, Enum):
    """Message class of an external trigger"""
    REMINDER = "reminder"
    MISSED_ROUTINE = "missed_routine"
    MILESTONE = "milestone"


class TriggerDecision(BaseModel):
    """Outcome of TriggerEngine.evaluate(); delivery is the host's job"""
    should_trigger: bool
    kind: Optional[TriggerKind] = None
    message: Optional[str] = None
