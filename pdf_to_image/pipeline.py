"""Per-document conversion loop: decode, then render every page in order."""

from __future__ import annotations

import logging
from typing import Callable, Generator, List, Optional

from .backends.base import PDFBackend
from .backends.pdfium_backend import PdfiumBackend
from .exceptions import describe_error
from .renderer import PageRenderer
from .types import (
    ConversionOptions,
    ConversionProgress,
    ConversionStatus,
    EncodedImage,
    SourceFile,
)

LOGGER = logging.getLogger("pdf_to_image.pipeline")

ProgressCallback = Callable[[ConversionProgress], None]
ConversionEvents = Generator[ConversionProgress, None, List[EncodedImage]]


class ConversionPipeline:
    """
    Converts one PDF into an ordered list of encoded page images.

    Pages are rendered strictly one after another. The first failing page
    aborts the document; the failure is reported as an ``error`` progress
    event and then re-raised unchanged.
    """

    def __init__(
        self,
        *,
        backend: Optional[PDFBackend] = None,
        renderer: Optional[PageRenderer] = None,
    ) -> None:
        self.backend: PDFBackend = backend or PdfiumBackend()
        self.renderer = renderer or PageRenderer()

    def iter_conversion(
        self,
        source: SourceFile,
        options: Optional[ConversionOptions] = None,
    ) -> ConversionEvents:
        """
        Yield progress events for ``source``; the generator returns the images.

        Example:
            >>> events = pipeline.iter_conversion(source)
            >>> for event in events:
            ...     print(event.current_page, event.total_pages, event.status)
        """
        options = options or ConversionOptions()
        LOGGER.info(
            "Starting conversion of %s (%d bytes, %s, scale %.2f)",
            source.name,
            source.size,
            options.format.value,
            options.scale,
        )

        try:
            document = self.backend.load(source.read_bytes())
        except Exception as exc:
            LOGGER.warning("Could not open %s: %s", source.name, exc)
            yield ConversionProgress(
                current_page=0,
                total_pages=0,
                file_name=source.name,
                status=ConversionStatus.ERROR,
                error=describe_error(exc),
            )
            raise

        images: List[EncodedImage] = []
        total_pages = document.page_count
        try:
            for page_number in range(1, total_pages + 1):
                try:
                    image = self.renderer.render(document, page_number, options)
                except Exception as exc:
                    LOGGER.warning(
                        "Page %d/%d of %s failed: %s",
                        page_number,
                        total_pages,
                        source.name,
                        exc,
                    )
                    yield ConversionProgress(
                        current_page=page_number,
                        total_pages=total_pages,
                        file_name=source.name,
                        status=ConversionStatus.ERROR,
                        error=describe_error(exc),
                    )
                    raise

                images.append(image)
                yield ConversionProgress(
                    current_page=page_number,
                    total_pages=total_pages,
                    file_name=source.name,
                    status=ConversionStatus.PROCESSING,
                    image=image,
                )
        finally:
            document.close()

        yield ConversionProgress(
            current_page=total_pages,
            total_pages=total_pages,
            file_name=source.name,
            status=ConversionStatus.COMPLETED,
        )
        LOGGER.info("Converted %s into %d image(s)", source.name, len(images))
        return images

    def convert(
        self,
        source: SourceFile,
        options: Optional[ConversionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[EncodedImage]:
        """Run the conversion, forwarding each event to ``on_progress``."""

        events = self.iter_conversion(source, options)
        try:
            while True:
                try:
                    event = next(events)
                except StopIteration as stop:
                    return stop.value
                if on_progress is not None:
                    on_progress(event)
        finally:
            events.close()


__all__ = ["ConversionPipeline", "ProgressCallback"]
