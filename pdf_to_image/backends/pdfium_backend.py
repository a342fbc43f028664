"""pypdfium2 backend implementation for PDF to Image."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

import pypdfium2 as pdfium
from PIL import Image

from ..exceptions import DecodeError, PageLoadError, RenderError
from .base import BackendDocument, BackendPage, PDFBackend

LOGGER = logging.getLogger("pdf_to_image.backends")

# pdfium is not thread-safe; every call into it goes through this lock.
PDFIUM_LOCK = threading.RLock()


class PdfiumPage(BackendPage):
    def __init__(self, page: pdfium.PdfPage, page_number: int) -> None:
        self._page = page
        self.page_number = page_number

    def render(self, scale: float) -> Image.Image:
        with PDFIUM_LOCK:
            bitmap = None
            try:
                bitmap = self._page.render(scale=scale)
                # to_pil() shares the bitmap buffer, which is freed on close
                return bitmap.to_pil().copy()
            except pdfium.PdfiumError as exc:
                raise RenderError(
                    f"Failed to render page {self.page_number}: {exc}",
                    page_number=self.page_number,
                ) from exc
            finally:
                if bitmap is not None:
                    bitmap.close()

    def close(self) -> None:
        with PDFIUM_LOCK:
            self._page.close()


@dataclass
class PdfiumDocument(BackendDocument):
    pdf: pdfium.PdfDocument = field(repr=False)

    def load_page(self, page_number: int) -> PdfiumPage:
        if page_number < 1 or page_number > self.page_count:
            raise PageLoadError(
                f"Page {page_number} is out of bounds. PDF has {self.page_count} pages.",
                page_number=page_number,
            )
        with PDFIUM_LOCK:
            try:
                page = self.pdf[page_number - 1]
            except pdfium.PdfiumError as exc:
                raise PageLoadError(
                    f"Failed to load page {page_number}: {exc}", page_number=page_number
                ) from exc
        return PdfiumPage(page, page_number)

    def close(self) -> None:
        with PDFIUM_LOCK:
            self.pdf.close()


class PdfiumBackend(PDFBackend):
    """Backend implementation that uses `pypdfium2` under the hood."""

    def load(self, data: bytes) -> PdfiumDocument:
        if not data:
            raise DecodeError("PDF data is empty.")

        with PDFIUM_LOCK:
            try:
                pdf = pdfium.PdfDocument(data)
            except pdfium.PdfiumError as exc:
                raise DecodeError(f"Corrupted or invalid PDF data. Error: {exc}") from exc
            page_count = len(pdf)

        LOGGER.debug("Decoded PDF with %d page(s)", page_count)
        return PdfiumDocument(page_count=page_count, pdf=pdf)
