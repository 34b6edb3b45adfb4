"""In-memory state store

Used by tests and by hosts that bring their own persistence. Nothing here
survives the process.
"""

import copy
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Dict-backed StateStore"""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._blobs: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Optional[Any]:
        """Get a copy of the blob so callers can't mutate stored state"""
        blob = self._blobs.get(key)
        return copy.deepcopy(blob) if blob is not None else None

    def save(self, key: str, blob: Any) -> None:
        self._blobs[key] = copy.deepcopy(blob)
        logger.debug(f"Saved {key} to in-memory store (NOT PERSISTED)")

    def keys(self) -> list[str]:
        return list(self._blobs)
