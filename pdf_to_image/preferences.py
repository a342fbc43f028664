"""Persistent user preferences (currently only the last save directory)."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import click

LOGGER = logging.getLogger("pdf_to_image.preferences")

APP_NAME = "pdf-to-image"
SAVE_PATH_KEY = "pdf_converter_save_path"
PREFERENCES_FILE = "preferences.json"


class PreferenceStore(Protocol):
    """String key/value store that survives process restarts."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    def clear(self, key: str) -> None:
        """Forget ``key``."""


class MemoryPreferenceStore:
    """In-process store, used when nothing should be written to disk."""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def clear(self, key: str) -> None:
        self._values.pop(key, None)


class JsonPreferenceStore:
    """Preferences kept in a small JSON document on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @classmethod
    def default(cls, config_dir: Optional[Union[str, Path]] = None) -> "JsonPreferenceStore":
        directory = Path(config_dir) if config_dir else Path(click.get_app_dir(APP_NAME))
        return cls(directory / PREFERENCES_FILE)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.error("Failed to load preferences from %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.error("Ignoring malformed preferences file %s", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=self.path.parent, suffix=".tmp", encoding="utf-8"
        ) as handle:
            json.dump(values, handle, indent=2, sort_keys=True)
            temp_path = Path(handle.name)
        temp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)

    def clear(self, key: str) -> None:
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)


def preferred_save_dir(preferences: PreferenceStore) -> Path:
    """Return the remembered save directory, or the working directory."""

    saved = preferences.get(SAVE_PATH_KEY)
    if saved:
        LOGGER.debug("Using saved path %s", saved)
        return Path(saved)
    return Path.cwd()


__all__ = [
    "PreferenceStore",
    "MemoryPreferenceStore",
    "JsonPreferenceStore",
    "SAVE_PATH_KEY",
    "preferred_save_dir",
]
