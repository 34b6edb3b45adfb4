"""Persistence port

The engine stores each entity (streak, reminders, rewards, challenges,
preferences, xp) as one JSON-compatible blob under its own key.
"""
from typing import Any, Optional, Protocol

# Entity keys
STREAK_KEY = "streak"
REMINDERS_KEY = "reminders"
REWARDS_KEY = "rewards"
CHALLENGES_KEY = "challenges"
PREFERENCES_KEY = "preferences"
XP_KEY = "xp"


class StateStore(Protocol):
    """Durable key-value surface for whole-entity blobs

    load() returns None when nothing was ever saved under the key, and must
    raise (never return None) when the backing store is unreachable.
    save() must replace the blob atomically.
    """

    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, blob: Any) -> None:
        ...
