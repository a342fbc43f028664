"""
Custom exceptions for PDF to Image.

This module defines all custom exceptions used throughout the library.
"""

from typing import Iterable, Optional

UNKNOWN_ERROR_MESSAGE = "Unknown error"


class PDFToImageException(Exception):
    """Base exception for all PDF to Image errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF conversion error occurred."


class InvalidOptionsError(PDFToImageException):
    """Raised when conversion options are out of range."""

    @property
    def default_message(self) -> str:
        return "Invalid conversion options."


class DecodeError(PDFToImageException):
    """Raised when bytes cannot be opened as a PDF document."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."


class PageError(PDFToImageException):
    """Base class for failures tied to a single page."""

    def __init__(self, message: str = "", page_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.page_number = page_number


class PageLoadError(PageError):
    """Raised when a page cannot be loaded from the document."""

    @property
    def default_message(self) -> str:
        return "Failed to load PDF page."


class RenderError(PageError):
    """Raised when a page cannot be rendered or encoded."""

    @property
    def default_message(self) -> str:
        return "Failed to render PDF page."


class DuplicateFileError(PDFToImageException):
    """Raised when files with the same name and size are already queued."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self.names = list(names)
        message = ""
        if len(self.names) == 1:
            message = f'"{self.names[0]}" has already been added.'
        elif self.names:
            message = f"{len(self.names)} files have already been added: {', '.join(self.names)}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "File has already been added."


class PersistenceError(PDFToImageException):
    """Raised when converted images cannot be archived or written."""

    @property
    def default_message(self) -> str:
        return "Failed to save converted images."


def describe_error(error: BaseException) -> str:
    """Return the user-facing message reported for ``error``."""

    if isinstance(error, PDFToImageException):
        return error.message
    if isinstance(error, Exception) and str(error):
        return str(error)
    return UNKNOWN_ERROR_MESSAGE
