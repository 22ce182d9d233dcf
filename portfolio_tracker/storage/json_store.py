"""Namespaced key/value store persisted as a single JSON file."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "solana-portfolio-"


class JsonFileStore:
    """Synchronous key/value persistence.

    Every key is stored with the namespace prefix, so several tools can share
    one file. Writes go to a temp file that replaces the original, so a
    reader never sees a partial write.
    """

    def __init__(self, path: str | Path, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.path = Path(path).expanduser()
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return self.namespace + key

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error reading store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing store %s: %s", self.path, e)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(self._key(key), default)

    def set(self, key: str, value: Any) -> bool:
        data = self._load()
        data[self._key(key)] = value
        return self._dump(data)

    def remove(self, key: str) -> bool:
        data = self._load()
        if data.pop(self._key(key), None) is None:
            return True
        return self._dump(data)

    def clear(self) -> bool:
        """Drop every key in this namespace, leaving other namespaces alone."""
        data = self._load()
        kept = {k: v for k, v in data.items() if not k.startswith(self.namespace)}
        return self._dump(kept)


class MemoryStore:
    """In-process store with the same interface, for tests and dry runs."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return json.loads(self._data[key]) if key in self._data else default

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = json.dumps(value)
        return True

    def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def clear(self) -> bool:
        self._data.clear()
        return True
