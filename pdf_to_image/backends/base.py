"""Backend protocol for decoding and rendering PDF documents."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from PIL import Image


class BackendPage:
    """A loaded page. Must be closed once rendering is finished."""

    page_number: int

    def render(self, scale: float) -> "Image.Image":
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


@dataclass
class BackendDocument:
    """Represents a decoded PDF document with backend-specific helpers."""

    page_count: int

    def load_page(self, page_number: int) -> BackendPage:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    @contextmanager
    def open_page(self, page_number: int) -> Iterator[BackendPage]:
        """Load the 1-based ``page_number`` and release it on exit."""

        page = self.load_page(page_number)
        try:
            yield page
        finally:
            page.close()

    def __enter__(self) -> "BackendDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PDFBackend(Protocol):
    """Protocol defining backend operations for decoding PDF bytes."""

    def load(self, data: bytes) -> BackendDocument:
        """Decode ``data`` and return a backend document wrapper."""
