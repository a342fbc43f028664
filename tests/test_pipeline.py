from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from conftest import FakeBackend, fake_source
from pdf_to_image.exceptions import DecodeError, PageLoadError, RenderError, UNKNOWN_ERROR_MESSAGE
from pdf_to_image.pipeline import ConversionPipeline
from pdf_to_image.types import ConversionOptions, ConversionProgress, ConversionStatus, ImageFormat, SourceFile


def _collect(pipeline: ConversionPipeline, source: SourceFile, options: ConversionOptions = None):
    events: List[ConversionProgress] = []
    images = pipeline.convert(source, options, events.append)
    return images, events


def test_two_page_pdf_emits_three_events(sample_pdf: Path) -> None:
    images, events = _collect(ConversionPipeline(), SourceFile.from_path(sample_pdf))

    assert len(images) == 2
    assert [e.status for e in events] == [
        ConversionStatus.PROCESSING,
        ConversionStatus.PROCESSING,
        ConversionStatus.COMPLETED,
    ]
    assert [e.current_page for e in events] == [1, 2, 2]
    assert all(e.total_pages == 2 for e in events)
    assert events[0].image is images[0]
    assert events[1].image is images[1]
    assert events[2].image is None
    assert events[0].image_url.startswith("data:image/png;base64,")
    assert all(e.file_name == "sample.pdf" for e in events)


def test_default_options_render_at_scale_two(sample_pdf: Path) -> None:
    images = ConversionPipeline().convert(SourceFile.from_path(sample_pdf))
    assert [(i.width, i.height) for i in images] == [(400, 400), (400, 400)]
    assert [i.page_number for i in images] == [1, 2]


def test_jpeg_options_are_used(fake_pipeline: ConversionPipeline) -> None:
    options = ConversionOptions(format="jpeg", scale=3.0)
    images = fake_pipeline.convert(fake_source("a.pdf", "pages=1"), options)
    assert images[0].format is ImageFormat.JPEG
    assert images[0].data.startswith(b"\xff\xd8")
    assert images[0].width == 30


def test_works_without_callback(fake_pipeline: ConversionPipeline) -> None:
    assert len(fake_pipeline.convert(fake_source("a.pdf", "pages=3"))) == 3


def test_decode_failure_reports_once_and_raises(fake_pipeline: ConversionPipeline, fake_backend: FakeBackend) -> None:
    events: List[ConversionProgress] = []
    with pytest.raises(DecodeError):
        fake_pipeline.convert(fake_source("bad.pdf", "broken"), None, events.append)

    assert events == [
        ConversionProgress(
            current_page=0,
            total_pages=0,
            file_name="bad.pdf",
            status=ConversionStatus.ERROR,
            error="not a PDF",
        )
    ]
    assert fake_backend.documents == []


def test_real_decode_failure(tmp_path: Path) -> None:
    events: List[ConversionProgress] = []
    source = SourceFile.from_bytes("junk.pdf", b"definitely not a pdf")
    with pytest.raises(DecodeError):
        ConversionPipeline().convert(source, None, events.append)
    assert len(events) == 1
    assert events[0].status is ConversionStatus.ERROR
    assert (events[0].current_page, events[0].total_pages) == (0, 0)


def test_page_load_failure_stops_document(fake_pipeline: ConversionPipeline, fake_backend: FakeBackend) -> None:
    events: List[ConversionProgress] = []
    with pytest.raises(PageLoadError):
        fake_pipeline.convert(fake_source("a.pdf", "pages=4;fail=2"), None, events.append)

    assert [(e.current_page, e.total_pages, e.status) for e in events] == [
        (1, 4, ConversionStatus.PROCESSING),
        (2, 4, ConversionStatus.ERROR),
    ]
    assert events[-1].error == "cannot load page 2"
    document = fake_backend.documents[0]
    assert document.closed
    assert document.closed_pages == [1]


def test_render_failure_reports_page(fake_pipeline: ConversionPipeline) -> None:
    events: List[ConversionProgress] = []
    with pytest.raises(RenderError):
        fake_pipeline.convert(fake_source("a.pdf", "pages=2;render=1"), None, events.append)
    assert [(e.current_page, e.total_pages, e.status) for e in events] == [(1, 2, ConversionStatus.ERROR)]


def test_unstructured_error_is_normalised_but_propagated(fake_pipeline: ConversionPipeline) -> None:
    events: List[ConversionProgress] = []
    with pytest.raises(RuntimeError):
        fake_pipeline.convert(fake_source("a.pdf", "pages=1;crash=1"), None, events.append)
    assert events[-1].error == UNKNOWN_ERROR_MESSAGE


def test_zero_page_document(fake_pipeline: ConversionPipeline) -> None:
    images, events = _collect(fake_pipeline, fake_source("empty.pdf", "pages=0"))
    assert images == []
    assert events == [ConversionProgress(0, 0, "empty.pdf", ConversionStatus.COMPLETED)]


def test_iter_conversion_is_pull_based(fake_pipeline: ConversionPipeline, fake_backend: FakeBackend) -> None:
    events = fake_pipeline.iter_conversion(fake_source("a.pdf", "pages=3"))

    first = next(events)
    assert (first.current_page, first.total_pages) == (1, 3)
    assert fake_backend.documents[0].closed_pages == [1]

    rest = []
    with pytest.raises(StopIteration) as stop:
        while True:
            rest.append(next(events))
    assert [e.current_page for e in rest] == [2, 3, 3]
    assert [i.page_number for i in stop.value.value] == [1, 2, 3]


def test_closing_iterator_early_releases_document(fake_pipeline: ConversionPipeline, fake_backend: FakeBackend) -> None:
    events = fake_pipeline.iter_conversion(fake_source("a.pdf", "pages=5"))
    next(events)
    events.close()
    assert fake_backend.documents[0].closed


def test_progress_pages_strictly_increase(fake_pipeline: ConversionPipeline) -> None:
    _, events = _collect(fake_pipeline, fake_source("a.pdf", "pages=6"))
    processing = [e.current_page for e in events if e.status is ConversionStatus.PROCESSING]
    assert processing == sorted(set(processing))
    assert events[-1].current_page == events[-1].total_pages == 6
