"""
PDF to Image - Convert PDF pages into PNG or JPEG images.

This library renders every page of one or more PDF files, reports
page-level progress, and saves the resulting images either as downloads
into a directory or to a location chosen by the user, one by one or
bundled into a zip archive.

Quick Start:
    >>> from pdf_to_image import BatchOrchestrator, SourceFile
    >>> batch = BatchOrchestrator(download_dir='output/')
    >>> batch.add_files([SourceFile.from_path('report.pdf')])
    []
    >>> summary = batch.start_conversion()
    >>> batch.export_all_files()
    ['output/all_converted_300dpi_images.zip']

Main Classes:
    - BatchOrchestrator: Batch state, concurrent conversion and export
    - ConversionPipeline: Page-by-page conversion of a single PDF
    - PageRenderer: Render and encode one page

Exceptions:
    - PDFToImageException: Base exception
    - DecodeError: Invalid or corrupted PDF
    - PageLoadError / RenderError: A page could not be converted
    - DuplicateFileError: File already queued
    - PersistenceError: Output could not be written

For CLI usage, use the 'pdf-to-image' command after installation.
"""

# Core classes
from pdf_to_image.orchestrator import BatchOrchestrator
from pdf_to_image.pipeline import ConversionPipeline
from pdf_to_image.renderer import PageRenderer

# Data types
from pdf_to_image.types import (
    ConversionOptions,
    ConversionProgress,
    ConversionStatus,
    ConversionSummary,
    EncodedImage,
    FileProgress,
    ImageFormat,
    OutputItem,
    SourceFile,
)

# Persistence
from pdf_to_image.capabilities import Capabilities, detect_capabilities
from pdf_to_image.preferences import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore
from pdf_to_image.sinks import EphemeralDownloadSink, NativeDirectorySink, PersistenceSink, select_sink
from pdf_to_image.archive import build_archive

# Exceptions
from pdf_to_image.exceptions import (
    PDFToImageException,
    InvalidOptionsError,
    DecodeError,
    PageLoadError,
    RenderError,
    DuplicateFileError,
    PersistenceError,
)

# Naming
from pdf_to_image.naming import dpi_of, name_of, base_name_of

__version__ = "1.0.0"
__author__ = "PDF to Image CLI Contributors"
__license__ = "MIT"

__all__ = [
    # Main classes
    "BatchOrchestrator",
    "ConversionPipeline",
    "PageRenderer",
    # Data types
    "ConversionOptions",
    "ConversionProgress",
    "ConversionStatus",
    "ConversionSummary",
    "EncodedImage",
    "FileProgress",
    "ImageFormat",
    "OutputItem",
    "SourceFile",
    # Persistence
    "Capabilities",
    "detect_capabilities",
    "PreferenceStore",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "PersistenceSink",
    "EphemeralDownloadSink",
    "NativeDirectorySink",
    "select_sink",
    "build_archive",
    # Exceptions
    "PDFToImageException",
    "InvalidOptionsError",
    "DecodeError",
    "PageLoadError",
    "RenderError",
    "DuplicateFileError",
    "PersistenceError",
    # Naming
    "dpi_of",
    "name_of",
    "base_name_of",
    # Version info
    "__version__",
]
