"""Persistent JSON-backed key-value store for coordinator state."""

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

Value = Union[str, bool, int]


class PreferencesStore:
    """Process-wide key-value store persisted to a single JSON file.

    Every ``set`` is written to disk before it returns, using an atomic
    replace so a crash never leaves a half-written file. Keys are never
    deleted.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> Dict[str, Any]:
        """Load values from disk. Returns empty dict if file missing or unreadable."""
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load preferences from {self.path}: {e}")
                data = {}
            if not isinstance(data, dict):
                logger.warning(f"Ignoring non-object preferences file {self.path}")
                data = {}
            self._data = data
        else:
            self._data = {}
        return self._data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp = tempfile.mkstemp(
                dir=str(self.path.parent), suffix=".tmp", prefix="preferences_"
            )
            try:
                with open(fd, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, indent=2, ensure_ascii=False)
                Path(tmp).replace(self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to save preferences to {self.path}: {e}")
            raise

    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        return self._data.get(key, default)

    def get_string(self, key: str) -> Optional[str]:
        """Return a string value, or None if absent or of another type."""
        value = self._data.get(key)
        return value if isinstance(value, str) else None

    def get_bool(self, key: str) -> bool:
        """Return a bool value; absent keys read as False."""
        value = self._data.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        return False

    def get_int(self, key: str) -> int:
        """Return an int value; absent keys read as 0."""
        value = self._data.get(key)
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        return 0

    def set(self, key: str, value: Value) -> None:
        """Store a value and write it through to disk."""
        self._data[key] = value
        self._save()

    def contains(self, key: str) -> bool:
        return key in self._data

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)
