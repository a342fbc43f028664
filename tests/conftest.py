from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
from PIL import Image
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_to_image.backends.base import BackendDocument, BackendPage  # noqa: E402
from pdf_to_image.exceptions import DecodeError, PageLoadError, RenderError  # noqa: E402
from pdf_to_image.pipeline import ConversionPipeline  # noqa: E402
from pdf_to_image.types import SourceFile  # noqa: E402


def write_pdf(path: Path, pages: int = 2, width: int = 200, height: int = 200) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    with path.open("wb") as handle:
        writer.write(handle)
    return path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, pages: int = 2, width: int = 200, height: int = 200) -> Path:
        return write_pdf(tmp_path / filename, pages=pages, width=width, height=height)

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: Callable[..., Path]) -> Path:
    return pdf_factory("sample.pdf", pages=2)


# ----------------------------------------------------------------------
# Fake backend: the PDF "bytes" are a small script such as b"pages=3",
# b"pages=3;fail=2", b"pages=2;render=1", b"pages=1;crash=1" or b"broken".
# ----------------------------------------------------------------------
class FakePage(BackendPage):
    def __init__(self, document: "FakeDocument", page_number: int) -> None:
        self.document = document
        self.page_number = page_number

    def render(self, scale: float) -> Image.Image:
        if self.page_number == self.document.render_fail:
            raise RenderError("render exploded", page_number=self.page_number)
        if self.page_number == self.document.crash_on:
            raise RuntimeError()
        size = max(1, int(10 * scale))
        return Image.new("RGB", (size, size), "white")

    def close(self) -> None:
        self.document.closed_pages.append(self.page_number)


class FakeDocument(BackendDocument):
    def __init__(self, page_count: int, load_fail: int = 0, render_fail: int = 0, crash_on: int = 0) -> None:
        self.page_count = page_count
        self.load_fail = load_fail
        self.render_fail = render_fail
        self.crash_on = crash_on
        self.closed_pages: List[int] = []
        self.closed = False

    def load_page(self, page_number: int) -> FakePage:
        if page_number == self.load_fail:
            raise PageLoadError(f"cannot load page {page_number}", page_number=page_number)
        return FakePage(self, page_number)

    def close(self) -> None:
        self.closed = True


class FakeBackend:
    def __init__(self) -> None:
        self.loads: List[bytes] = []
        self.documents: List[FakeDocument] = []

    def load(self, data: bytes) -> FakeDocument:
        self.loads.append(data)
        if data == b"broken":
            raise DecodeError("not a PDF")
        settings: Dict[str, int] = {}
        for part in data.decode().split(";"):
            key, value = part.split("=")
            settings[key] = int(value)
        document = FakeDocument(
            settings.get("pages", 0),
            load_fail=settings.get("fail", 0),
            render_fail=settings.get("render", 0),
            crash_on=settings.get("crash", 0),
        )
        self.documents.append(document)
        return document


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def fake_pipeline(fake_backend: FakeBackend) -> ConversionPipeline:
    return ConversionPipeline(backend=fake_backend)


def fake_source(name: str, script: str, size: Optional[int] = None) -> SourceFile:
    data = script.encode()
    return SourceFile(name=name, size=len(data) if size is None else size, data=data)
