"""Render single PDF pages and encode them with Pillow."""

from __future__ import annotations

import io
import logging

from PIL import Image

from .backends.base import BackendDocument
from .exceptions import RenderError
from .types import ConversionOptions, EncodedImage, ImageFormat

LOGGER = logging.getLogger("pdf_to_image.renderer")

_PIL_FORMATS = {
    ImageFormat.PNG: "PNG",
    ImageFormat.JPEG: "JPEG",
}


def jpeg_quality(quality: float) -> int:
    """Map a [0, 1] quality to Pillow's JPEG quality scale."""

    return max(1, min(100, int(round(quality * 100))))


def encode_surface(surface: Image.Image, fmt: ImageFormat, quality: float) -> bytes:
    """Encode ``surface`` to ``fmt``; ``quality`` is ignored for lossless output."""

    buffer = io.BytesIO()
    if fmt.lossless:
        surface.save(buffer, format=_PIL_FORMATS[fmt])
    else:
        if surface.mode not in ("RGB", "L"):
            surface = surface.convert("RGB")
        surface.save(buffer, format=_PIL_FORMATS[fmt], quality=jpeg_quality(quality))
    return buffer.getvalue()


class PageRenderer:
    """Turns one page of a decoded document into an :class:`EncodedImage`."""

    def render(
        self,
        document: BackendDocument,
        page_number: int,
        options: ConversionOptions,
    ) -> EncodedImage:
        with document.open_page(page_number) as page:
            surface = page.render(options.scale)
            try:
                data = encode_surface(surface, options.format, options.quality)
                width, height = surface.size
            except (OSError, ValueError) as exc:
                raise RenderError(
                    f"Failed to encode page {page_number} as {options.format.value}: {exc}",
                    page_number=page_number,
                ) from exc
            finally:
                surface.close()

        LOGGER.debug(
            "Rendered page %d at scale %.2f (%dx%d, %d bytes)",
            page_number,
            options.scale,
            width,
            height,
            len(data),
        )
        return EncodedImage(
            data=data,
            format=options.format,
            width=width,
            height=height,
            page_number=page_number,
        )


__all__ = ["PageRenderer", "encode_surface", "jpeg_quality"]
