"""JSON file backed storage for the terminal front-end.

The whole store is a single JSON object of string values. The file is loaded
lazily and rewritten on every change through a temporary file, so a crash never
leaves a half-written store behind. ``refresh`` re-reads the file and notifies
subscribers of keys another process changed.
"""

import json
import logging
import os
from pathlib import Path
import tempfile

from .port import Listener, ListenerRegistry, StorageError, Unsubscribe

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """String key-value store persisted as one JSON object.

    Args:
        path (str | Path): Location of the JSON file. Created on first write.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, str] | None = None
        self._listeners = ListenerRegistry()

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = {**self._load(), key: value}
        self._write(data)
        self._data = data
        self._listeners.notify(key, value)

    def remove(self, key: str) -> None:
        data = dict(self._load())
        if data.pop(key, None) is not None:
            self._write(data)
            self._data = data
            self._listeners.notify(key, None)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._listeners.subscribe(listener)

    def refresh(self) -> list[str]:
        """Re-read the file and notify subscribers of every changed key.

        Returns:
            list[str]: Keys whose value changed since the last read.
        """
        before = dict(self._load())
        self._data = self._read()
        changed = sorted(key for key in before.keys() | self._data.keys() if before.get(key) != self._data.get(key))
        for key in changed:
            self._listeners.notify(key, self._data.get(key))
        return changed

    def _load(self) -> dict[str, str]:
        if self._data is None:
            self._data = self._read()
        return self._data

    def _read(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.path, e)
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed storage file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: expected a JSON object", self.path)
            return {}
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def _write(self, data: dict[str, str]) -> None:
        """Replace the file with ``data``. The temporary file never outlives a failure.

        Raises:
            StorageError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        except OSError as e:
            msg = f"Cannot write {self.path}: {e}"
            raise StorageError(msg) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException as e:
            Path(tmp).unlink(missing_ok=True)
            if isinstance(e, OSError):
                msg = f"Cannot write {self.path}: {e}"
                raise StorageError(msg) from e
            raise
