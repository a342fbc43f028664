"""Output naming scheme for converted images and archives."""

from __future__ import annotations

import math
from typing import Optional

BASE_DPI = 150
SOURCE_SUFFIX = ".pdf"


def dpi_of(scale: float) -> int:
    """Return the DPI label for ``scale`` (1.0 == 150 DPI), rounding halves up."""

    return int(math.floor(scale * BASE_DPI + 0.5))


def _extension(fmt: object) -> str:
    return str(getattr(fmt, "value", fmt))


def name_of(base_name: str, dpi: int, fmt: object, page_index: Optional[int] = None) -> str:
    """
    Build the file name of one output image.

    Example:
        >>> name_of("report", 300, "png", 2)
        'report_300dpi_page_2.png'
    """
    page_part = f"_page_{page_index}" if page_index else ""
    return f"{base_name}_{dpi}dpi{page_part}.{_extension(fmt)}"


def base_name_of(file_name: str) -> str:
    """Strip a trailing ``.pdf`` suffix (any case) from ``file_name``."""

    if file_name.lower().endswith(SOURCE_SUFFIX) and len(file_name) > len(SOURCE_SUFFIX):
        return file_name[: -len(SOURCE_SUFFIX)]
    return file_name


def archive_name_of(base_name: str, dpi: int) -> str:
    return f"{base_name}_{dpi}dpi_images.zip"


def combined_archive_name(dpi: int) -> str:
    return f"all_converted_{dpi}dpi_images.zip"


__all__ = [
    "BASE_DPI",
    "dpi_of",
    "name_of",
    "base_name_of",
    "archive_name_of",
    "combined_archive_name",
]
