"""
JSON key-value state persistence.

Small documents (preferences, portfolio) are loaded once on start and
written back whole on every change. Writes go to a temporary file in the
same directory and are renamed into place so a crash never leaves a
truncated file behind.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import orjson


logger = logging.getLogger(__name__)


class JsonStateStore:
    """
    File-backed key-value store.

    Values must be orjson-serializable (dicts, lists, str, numbers,
    dataclasses). A missing or corrupt file loads as an empty store.
    """

    def __init__(self, path: Path) -> None:
        """
        Initialize store and load existing state.

        Args:
            path: JSON file location. Parent directories are created on save.
        """
        self._path = Path(path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        """Read state from disk."""
        if not self._path.exists():
            return {}

        try:
            raw = orjson.loads(self._path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self._path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring state file {self._path}: top level is not an object")
            return {}

        return raw

    def _save(self) -> None:
        """Atomically write state to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(self._data, option=orjson.OPT_INDENT_2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """Get a stored value."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value and persist immediately."""
        # Round-trip through orjson so dataclasses are stored as plain JSON
        self._data[key] = orjson.loads(orjson.dumps(value))
        self._save()

    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed.
        """
        if key not in self._data:
            return False
        del self._data[key]
        self._save()
        return True

    def keys(self) -> list[str]:
        """Stored keys."""
        return list(self._data)

    @property
    def path(self) -> Path:
        """Backing file path."""
        return self._path
