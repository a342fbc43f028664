"""Destinations that converted images are written to."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, Union

import click

from .archive import build_archive
from .capabilities import Capabilities
from .exceptions import PersistenceError
from .preferences import (
    MemoryPreferenceStore,
    PreferenceStore,
    SAVE_PATH_KEY,
    preferred_save_dir,
)
from .types import OutputItem

LOGGER = logging.getLogger("pdf_to_image.sinks")

SavePrompt = Callable[[str, Path], Optional[Union[str, Path]]]


class PersistenceSink(Protocol):
    """Writes named payloads produced by one export action."""

    def save(
        self,
        items: Sequence[OutputItem],
        *,
        archive_name: str,
        always_archive: bool = False,
    ) -> List[str]:
        """Persist ``items`` and return the written locations."""


def _write_bytes(destination: Path, data: bytes) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
    except OSError as exc:
        raise PersistenceError(f"Unable to write {destination}. Error: {exc}") from exc


def _bundle(items: Sequence[OutputItem]) -> bytes:
    try:
        return build_archive(items)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"Unable to build archive. Error: {exc}") from exc


def unique_path(directory: Path, name: str) -> Path:
    """Return ``directory/name``, adding `` (n)`` before the suffix if taken."""

    candidate = directory / name
    stem, suffix = Path(name).stem, Path(name).suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


class EphemeralDownloadSink:
    """
    Delivers outputs like a browser download: no prompt, fixed directory.

    A single item is delivered as is. Several items, or any call with
    ``always_archive``, are bundled into one zip named ``archive_name``.
    """

    def __init__(self, download_dir: Union[str, Path]) -> None:
        self.download_dir = Path(download_dir)

    def save(
        self,
        items: Sequence[OutputItem],
        *,
        archive_name: str,
        always_archive: bool = False,
    ) -> List[str]:
        if not items:
            return []

        if len(items) == 1 and not always_archive:
            name, data = items[0].name, items[0].data
        else:
            name, data = archive_name, _bundle(items)

        destination = unique_path(self.download_dir, name)
        _write_bytes(destination, data)
        LOGGER.info("Downloaded %s (%d bytes)", destination, len(data))
        return [str(destination)]


class NativeDirectorySink:
    """
    Prompts once for a location and writes every item individually.

    The prompt receives the first item's name and the remembered directory
    and returns the chosen path, or ``None`` when the user cancels. Later
    items go to the same directory under their own names.
    """

    def __init__(
        self,
        prompt: SavePrompt,
        preferences: Optional[PreferenceStore] = None,
    ) -> None:
        self.prompt = prompt
        self.preferences: PreferenceStore = preferences or MemoryPreferenceStore()

    def save(
        self,
        items: Sequence[OutputItem],
        *,
        archive_name: str,
        always_archive: bool = False,
    ) -> List[str]:
        if not items:
            return []

        choice = self.prompt(items[0].name, preferred_save_dir(self.preferences))
        if not choice:
            LOGGER.info("Save cancelled for %s", archive_name)
            return []

        first_path = Path(choice).expanduser()
        if first_path.is_dir():
            first_path = first_path / items[0].name
        directory = first_path.parent
        self.preferences.set(SAVE_PATH_KEY, str(directory))

        written: List[str] = []
        for index, item in enumerate(items):
            destination = first_path if index == 0 else directory / item.name
            _write_bytes(destination, item.data)
            written.append(str(destination))

        LOGGER.info("Saved %d file(s) to %s", len(written), directory)
        return written


def prompt_for_path(suggested_name: str, initial_dir: Path) -> Optional[str]:
    """Ask on the terminal where to save; ``None`` when aborted."""

    try:
        return click.prompt(
            "Save as",
            default=str(initial_dir / suggested_name),
            show_default=True,
        )
    except click.Abort:
        return None


def select_sink(
    capabilities: Capabilities,
    *,
    download_dir: Union[str, Path],
    prompt: SavePrompt = prompt_for_path,
    preferences: Optional[PreferenceStore] = None,
) -> PersistenceSink:
    """Pick the sink matching ``capabilities``."""

    if capabilities.native_filesystem:
        return NativeDirectorySink(prompt, preferences)
    return EphemeralDownloadSink(download_dir)


__all__ = [
    "PersistenceSink",
    "EphemeralDownloadSink",
    "NativeDirectorySink",
    "SavePrompt",
    "prompt_for_path",
    "select_sink",
    "unique_path",
]
