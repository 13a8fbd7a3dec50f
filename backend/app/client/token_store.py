"""Token Store - the single persistent slot holding the bearer credential.

Invariants:
    - The token is opaque: stored and returned verbatim, never parsed
    - get() returns None when no credential is held
    - clear() is idempotent
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    def get(self) -> str | None: ...
    def set(self, token: str) -> None: ...
    def clear(self) -> None: ...


class MemoryTokenStore:
    """Process-local slot (tests, short-lived scripts)."""

    def __init__(self, token: str | None = None):
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """JSON file with one named key; written atomically, owner-readable only."""

    def __init__(self, path: Path, key: str = "token"):
        self.path = Path(path)
        self.key = key

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable credential file {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cred-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self) -> str | None:
        token = self._load().get(self.key)
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        data = self._load()
        data[self.key] = token
        self._save(data)

    def clear(self) -> None:
        data = self._load()
        if self.key not in data:
            return
        del data[self.key]
        if data:
            self._save(data)
        else:
            self.path.unlink(missing_ok=True)
