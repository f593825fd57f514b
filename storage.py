# storage.py
# Local key-value persistence: one JSON document per key

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from config import DATA_DIR

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class MemoryStore:
    """In-process store with the same contract as JsonFileStore."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._items: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        raw = self._items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value, ensure_ascii=False)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStore:
    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else DATA_DIR

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def _ensure_dir(self):
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> Any:
        """Return the decoded value stored under `key`, or None if absent."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {key} from {path}: {e}")
            raise StorageError(f"Failed to read '{key}'") from e

    def set(self, key: str, value: Any) -> None:
        """Write `value` atomically (temp file, then replace)."""
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self._ensure_dir()
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            tmp.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {key} to {path}: {e}")
            raise StorageError(f"Failed to write '{key}'") from e

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove {key}: {e}")
            raise StorageError(f"Failed to remove '{key}'") from e


def default_store() -> JsonFileStore:
    return JsonFileStore(DATA_DIR)
