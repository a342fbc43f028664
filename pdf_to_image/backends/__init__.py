"""Backend abstractions for PDF to Image."""

from .base import BackendDocument, BackendPage, PDFBackend
from .pdfium_backend import PdfiumBackend

__all__ = [
    "BackendDocument",
    "BackendPage",
    "PDFBackend",
    "PdfiumBackend",
]
