"""
Tutor Chat v1.0: Persistence Adapter
Key/value store that survives restarts. Best-effort only: the host may wipe it
at any time, and the last writer wins.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

# ─── Keys ────────────────────────────────────────────────────────────────────
TOKEN_KEY = "token"
ACTIVE_COURSE_KEY = "activeCourse"
ACTIVE_LESSON_KEY = "activeLesson"
WELCOMED_KEY = "welcomed"


class PersistenceAdapter(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...
    def clear(self) -> None: ...


# ─── In-memory ───────────────────────────────────────────────────────────────

class MemoryStore:
    """Dict-backed store. Used by tests and headless hosts."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


# ─── JSON file ───────────────────────────────────────────────────────────────

class JsonFileStore:
    """
    Single JSON object on disk, rewritten on every change.
    Read and write failures are logged and swallowed: losing the store only
    means the user has to log in and pick a lesson again.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is None:
            self._data = {}
            if self.path.exists():
                try:
                    raw = json.loads(self.path.read_text(encoding="utf-8"))
                    if isinstance(raw, dict):
                        self._data = {str(k): str(v) for k, v in raw.items()}
                    else:
                        logger.warning(f"Store {self.path} is not a JSON object, starting empty")
                except (OSError, ValueError) as e:
                    logger.warning(f"Store {self.path} unreadable, starting empty: {e}")
        return self._data

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._load(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Store write to {self.path} failed: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()
