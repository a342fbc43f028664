"""
Type definitions and dataclasses for PDF to Image.

This module defines data structures used throughout the library.
"""

from __future__ import annotations

import base64
import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import InvalidOptionsError
from .naming import dpi_of

DEFAULT_SCALE = 2.0
DEFAULT_QUALITY = 0.95


class ImageFormat(str, Enum):
    """Output raster formats. The value doubles as the file extension."""

    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def lossless(self) -> bool:
        return self is ImageFormat.PNG

    @classmethod
    def parse(cls, value: Union[str, "ImageFormat"]) -> "ImageFormat":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError as exc:
            raise InvalidOptionsError(
                f"Unsupported image format: '{value}'. Expected 'png' or 'jpeg'."
            ) from exc


class ConversionStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class ConversionOptions:
    """
    Options applied to every page of a conversion run.

    Attributes:
        format: Output image format
        scale: Render scale; 1.0 corresponds to 150 DPI in output names
        quality: Encoder quality in [0, 1], only used for JPEG output
    """
    format: ImageFormat = ImageFormat.PNG
    scale: float = DEFAULT_SCALE
    quality: float = DEFAULT_QUALITY

    def __post_init__(self) -> None:
        object.__setattr__(self, "format", ImageFormat.parse(self.format))
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise InvalidOptionsError(f"Scale must be a finite number > 0, got {self.scale}")
        if not 0.0 <= self.quality <= 1.0:
            raise InvalidOptionsError(f"Quality must be within [0, 1], got {self.quality}")

    @property
    def dpi(self) -> int:
        return dpi_of(self.scale)

    def merged(self, **changes: object) -> "ConversionOptions":
        """Return a copy with ``changes`` applied; ``None`` values are ignored."""
        updates = {key: value for key, value in changes.items() if value is not None}
        unknown = set(updates) - {"format", "scale", "quality"}
        if unknown:
            raise InvalidOptionsError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return replace(self, **updates)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SourceFile:
    """
    An input PDF queued for conversion.

    Either ``data`` or ``path`` holds the content. ``id`` is generated per
    instance and identifies the file for progress tracking.
    """
    name: str
    size: int
    data: Optional[bytes] = field(default=None, repr=False)
    path: Optional[Path] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        resolved = Path(path)
        return cls(name=resolved.name, size=resolved.stat().st_size, path=resolved)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "SourceFile":
        return cls(name=name, size=len(data), data=data)

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"SourceFile '{self.name}' has neither data nor path")
        return self.path.read_bytes()


@dataclass(frozen=True)
class EncodedImage:
    """One rendered and encoded page."""
    data: bytes = field(repr=False)
    format: ImageFormat
    width: int
    height: int
    page_number: int

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.format.mime_type};base64,{self.base64}"


@dataclass(frozen=True)
class ConversionProgress:
    """
    Latest progress state reported for one file.

    Attributes:
        current_page: Last page processed (0 before the first page)
        total_pages: Page count of the document (0 until decoded)
        file_name: Name of the source file
        status: processing, completed or error
        image: Image rendered for ``current_page`` on processing events
        error: Failure message on error events
    """
    current_page: int
    total_pages: int
    file_name: str
    status: ConversionStatus = ConversionStatus.PROCESSING
    image: Optional[EncodedImage] = field(default=None, repr=False)
    error: Optional[str] = None

    @property
    def image_url(self) -> Optional[str]:
        return self.image.data_url if self.image is not None else None

    @classmethod
    def initial(cls, file_name: str) -> "ConversionProgress":
        return cls(current_page=0, total_pages=0, file_name=file_name)


@dataclass
class FileProgress:
    """Progress and output of one file in the batch."""
    file: SourceFile
    progress: ConversionProgress
    images: List[EncodedImage] = field(default_factory=list)

    @classmethod
    def pending(cls, file: SourceFile) -> "FileProgress":
        return cls(file=file, progress=ConversionProgress.initial(file.name))

    @property
    def is_converted(self) -> bool:
        return len(self.images) > 0


@dataclass
class ConversionSummary:
    """
    Result of a batch conversion pass.

    Attributes:
        total: Number of files in the batch
        converted: Files converted successfully in this pass
        failed: Files whose conversion failed in this pass
        skipped: Files already converted before this pass
        errors: Failure message by file name
    """
    total: int = 0
    converted: int = 0
    failed: int = 0
    skipped: int = 0
    errors: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            "ConversionSummary(total={total}, converted={converted}, "
            "failed={failed}, skipped={skipped})"
        ).format(
            total=self.total,
            converted=self.converted,
            failed=self.failed,
            skipped=self.skipped,
        )


@dataclass(frozen=True)
class OutputItem:
    """A named payload handed to a persistence sink."""
    name: str
    data: bytes = field(repr=False)
