"""JSON file state store

One file per entity under DATA_PATH. Writes go to a temp file in the same
directory and are moved into place with os.replace(), so an interrupted
write leaves the previous blob intact.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from habit_engine.config import DATA_PATH
from habit_engine.exceptions import wrap_external_exception

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Filesystem-backed StateStore"""

    def __init__(self, data_path: Path = DATA_PATH, prefix: str = "habit-"):
        self.data_path = Path(data_path)
        self.prefix = prefix

    def path_for(self, key: str) -> Path:
        """Get the file holding an entity"""
        return self.data_path / f"{self.prefix}{key}.json"

    def load(self, key: str) -> Optional[Any]:
        """Read a blob; None when the file was never written"""
        filepath = self.path_for(key)
        try:
            if not filepath.exists():
                logger.debug(f"No stored {key} at {filepath}")
                return None
            return json.loads(filepath.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise wrap_external_exception(e, operation="load", key=key, context={"path": str(filepath)})

    def save(self, key: str, blob: Any) -> None:
        """Atomically replace a blob"""
        filepath = self.path_for(key)
        tmp_name = None
        try:
            payload = json.dumps(blob, indent=2, sort_keys=True)
            self.data_path.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_path, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, filepath)
            tmp_name = None
            logger.debug(f"Saved {key} to {filepath}")
        except (OSError, TypeError, ValueError) as e:
            raise wrap_external_exception(e, operation="save", key=key, context={"path": str(filepath)})
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
