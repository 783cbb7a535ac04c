"""
Preference store abstraction for the Bay Navigator safety layer.

This module provides the durable key-value storage the safety engine
writes its settings and persisted history to, plus the stable key names
that form the on-disk contract.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any

from .models import SafetyError

logger = logging.getLogger(__name__)


class PreferenceKey(str, Enum):
    """Stored preference names. Stable across app versions."""

    QUICK_EXIT_ENABLED = "quick_exit_enabled"
    QUICK_EXIT_URL = "quick_exit_url"
    INCOGNITO_MODE = "incognito_mode"
    SHOW_SAFETY_TIPS = "show_safety_tips"
    NETWORK_WARNINGS = "network_warnings"
    RECENT_PROGRAMS = "recent_programs"
    SEARCH_HISTORY = "search_history"
    DISGUISED_MODE = "disguised_mode"
    DISGUISED_ICON = "disguised_icon"

    def qualified(self, namespace: str) -> str:
        """Return the namespaced key, e.g. ``bay_navigator:incognito_mode``."""
        return f"{namespace}:{self.value}"


class PreferenceStoreError(SafetyError):
    """Raised when the preference store cannot be read or written."""
    pass


class PreferenceStore(ABC):
    """
    Abstract base class for preference storage backends.

    Backends implement raw value access; the typed accessors are built on
    top of it and reject values of the wrong type. All methods are async
    to support both local and remote backends.
    """

    @abstractmethod
    async def get(self, key: str) -> Any:
        """
        Return the raw stored value, or None if absent.

        Raises:
            PreferenceStoreError: If the backend cannot be read.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """
        Store a raw value, replacing any previous one.

        Raises:
            PreferenceStoreError: If the backend cannot be written.
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed, False otherwise.

        Raises:
            PreferenceStoreError: If the backend cannot be written.
        """
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return all stored keys."""
        pass

    async def get_bool(self, key: str) -> bool | None:
        return self._typed(key, await self.get(key), bool)

    async def set_bool(self, key: str, value: bool) -> None:
        await self.set(key, bool(value))

    async def get_string(self, key: str) -> str | None:
        return self._typed(key, await self.get(key), str)

    async def set_string(self, key: str, value: str) -> None:
        await self.set(key, str(value))

    async def get_string_list(self, key: str) -> list[str] | None:
        value = self._typed(key, await self.get(key), list)
        if value is None:
            return None
        if not all(isinstance(item, str) for item in value):
            raise PreferenceStoreError(f"Preference {key!r} is not a list of strings")
        return list(value)

    async def set_string_list(self, key: str, value: list[str]) -> None:
        await self.set(key, [str(item) for item in value])

    @staticmethod
    def _typed(key: str, value: Any, expected: type) -> Any:
        if value is None:
            return None
        if not isinstance(value, expected):
            raise PreferenceStoreError(
                f"Preference {key!r} holds {type(value).__name__}, expected {expected.__name__}"
            )
        return value


class InMemoryPreferenceStore(PreferenceStore):
    """
    In-memory implementation of PreferenceStore.

    Not persistent across restarts. Use for testing and ephemeral sessions.

    Example:
        store = InMemoryPreferenceStore()
        await store.set_bool("bay_navigator:incognito_mode", True)
        assert await store.get_bool("bay_navigator:incognito_mode") is True
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Any:
        value = self._values.get(key)
        return list(value) if isinstance(value, list) else value

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = list(value) if isinstance(value, list) else value

    async def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)


class JsonFilePreferenceStore(PreferenceStore):
    """
    Preference store backed by a single JSON file.

    The file is read lazily on first access and cached. Every write
    rewrites the whole file atomically (temporary file, then rename), so
    readers never see a partial write.

    Parameters:
        path: Location of the JSON file. Parent directories are created
            on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._values: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any:
        values = self._load()
        return values.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            values = dict(self._load())
            values[key] = value
            self._save(values)

    async def remove(self, key: str) -> bool:
        async with self._lock:
            values = dict(self._load())
            if key not in values:
                return False
            del values[key]
            self._save(values)
            return True

    async def keys(self) -> list[str]:
        return list(self._load())

    def _load(self) -> dict[str, Any]:
        if self._values is not None:
            return self._values
        if not self.path.exists():
            self._values = {}
            return self._values
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PreferenceStoreError(f"Cannot read preferences at {self.path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise PreferenceStoreError(f"Preferences at {self.path} are not a JSON object")
        self._values = raw
        return self._values

    def _save(self, values: dict[str, Any]) -> None:
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(values, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise PreferenceStoreError(f"Cannot write preferences at {self.path}: {exc}") from exc
        self._values = values
        logger.debug("Saved %d preferences to %s", len(values), self.path)
