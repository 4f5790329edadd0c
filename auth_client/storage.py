"""
Token storage backends for AuthClient.

MemoryTokenStorage lives as long as the process (the "session" choice);
FileTokenStorage persists to a JSON file (the "remember me" choice).
"""
from __future__ import annotations

import json
import os
import threading
from pathlib import Path


class TokenStorage:
    """Minimal key/value interface the client needs."""

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryTokenStorage(TokenStorage):
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)


class FileTokenStorage(TokenStorage):
    """JSON file store, written with 0600 permissions."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            # A corrupt file holds nothing we could use
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get(self, key):
        with self._lock:
            return self._read().get(key)

    def set(self, key, value):
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key):
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
