"""Build the named outputs of the two export actions."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from .naming import archive_name_of, base_name_of, combined_archive_name, name_of
from .types import ConversionOptions, FileProgress, OutputItem


def output_items(
    file_progress: FileProgress,
    options: ConversionOptions,
    base_name: Optional[str] = None,
) -> List[OutputItem]:
    """Name every image of ``file_progress`` as ``{base}_{dpi}dpi_page_{n}.{ext}``."""

    if base_name is None:
        base_name = base_name_of(file_progress.file.name)
    return [
        OutputItem(
            name=name_of(base_name, options.dpi, options.format, index),
            data=image.data,
        )
        for index, image in enumerate(file_progress.images, start=1)
    ]


def unique_base_name(base_name: str, taken: Set[str]) -> str:
    """Return ``base_name``, or ``base_name (n)`` when it is already in ``taken``."""

    candidate = base_name
    counter = 1
    while candidate in taken:
        candidate = f"{base_name} ({counter})"
        counter += 1
    return candidate


def file_export(
    file_progress: FileProgress,
    options: ConversionOptions,
) -> Tuple[List[OutputItem], str]:
    """Items and archive name for exporting a single file."""

    archive_name = archive_name_of(base_name_of(file_progress.file.name), options.dpi)
    return output_items(file_progress, options), archive_name


def combined_export(
    file_progresses: Iterable[FileProgress],
    options: ConversionOptions,
) -> Tuple[List[OutputItem], str]:
    """
    Items of every converted file, in batch order, plus the combined archive name.

    Files sharing a base name (same name, different size) get `` (n)``
    appended to the later base names so no two items share a name.
    """

    items: List[OutputItem] = []
    taken: Set[str] = set()
    for file_progress in file_progresses:
        if not file_progress.is_converted:
            continue
        base_name = unique_base_name(base_name_of(file_progress.file.name), taken)
        taken.add(base_name)
        items.extend(output_items(file_progress, options, base_name))
    return items, combined_archive_name(options.dpi)


__all__ = ["output_items", "unique_base_name", "file_export", "combined_export"]
