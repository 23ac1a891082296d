"""
User preferences kept outside the backend.

Two key/value stores are provided: ``JsonFileStore`` persists across
restarts (the equivalent of browser local storage) and ``MemoryStore``
lives for the process (session storage).  Values are strings.

The language preference and notes typed before a wedding record exists
are kept here.  Notes for an existing wedding are written to the
backend through a debounced saver so that a burst of keystrokes results
in one remote write.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

LANGUAGE_KEY = "preferredLanguage"
LANGUAGES = ("en", "ru", "ua")
DEFAULT_LANGUAGE = "ru"

NOTES_KEY = "weddingNotes"


class MemoryStore:
    """Process-lifetime key/value store."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(MemoryStore):
    """Key/value store persisted to a JSON file on every write."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    self._data = {str(k): str(v) for k, v in data.items()}
            except (OSError, ValueError) as exc:
                logger.warning("Could not read preferences from %s: %s", self.path, exc)

    def _flush(self) -> None:
        try:
            self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write preferences to %s: %s", self.path, exc)

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._flush()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._flush()


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------

def get_initial_language(store: MemoryStore, key: str = LANGUAGE_KEY) -> str:
    """Stored language, or the default when nothing valid is stored."""
    value = store.get(key)
    if value in LANGUAGES:
        return value
    return DEFAULT_LANGUAGE


def set_language(store: MemoryStore, language: str, key: str = LANGUAGE_KEY) -> str:
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    store.set(key, language)
    return language


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

RemoteSave = Callable[[str], Awaitable[bool]]


class DebouncedNotesSaver:
    """Collapses rapid note edits into a single save.

    Every :meth:`schedule` call restarts the timer.  When it fires, the
    latest text is written with ``save_remote`` if one was given (the
    wedding exists) and to the local store otherwise.
    """

    def __init__(self, store: MemoryStore, delay_ms: int = 1000, storage_key: str = NOTES_KEY) -> None:
        self.store = store
        self.delay_ms = delay_ms
        self.storage_key = storage_key
        self._text: Optional[str] = None
        self._save_remote: Optional[RemoteSave] = None
        self._timer: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self, text: str, save_remote: Optional[RemoteSave] = None) -> None:
        self._text = text
        self._save_remote = save_remote
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire())

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay_ms / 1000.0)
        self._timer = None
        await self._save()

    async def flush(self) -> bool:
        """Save pending text now.  Returns False if the remote save failed."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._text is None:
            return True
        return await self._save()

    async def _save(self) -> bool:
        text, save_remote = self._text, self._save_remote
        self._text = None
        if text is None:
            return True
        if save_remote is None:
            self.store.set(self.storage_key, text)
            logger.debug("Notes saved locally under %s", self.storage_key)
            return True
        ok = await save_remote(text)
        if not ok:
            logger.error("Failed to save notes")
        return ok
