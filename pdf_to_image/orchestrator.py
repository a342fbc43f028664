"""Batch conversion of several PDFs with per-file progress tracking."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .capabilities import Capabilities
from .exceptions import DuplicateFileError, describe_error
from .exporter import combined_export, file_export
from .pipeline import ConversionPipeline
from .preferences import MemoryPreferenceStore, PreferenceStore
from .sinks import PersistenceSink, SavePrompt, prompt_for_path, select_sink
from .types import (
    ConversionOptions,
    ConversionProgress,
    ConversionStatus,
    ConversionSummary,
    EncodedImage,
    FileProgress,
    SourceFile,
)

LOGGER = logging.getLogger("pdf_to_image.orchestrator")

ProgressObserver = Callable[[str, ConversionProgress], None]


class BatchOrchestrator:
    """
    Owns the batch: input files, their progress and the conversion options.

    Progress is keyed by each file's ``id``. Every conversion pass captures
    the current generation; :meth:`update_options` and :meth:`reset` start a
    new generation, and results reported for an older one are dropped.
    """

    def __init__(
        self,
        *,
        pipeline: Optional[ConversionPipeline] = None,
        sink: Optional[PersistenceSink] = None,
        capabilities: Optional[Capabilities] = None,
        preferences: Optional[PreferenceStore] = None,
        options: Optional[ConversionOptions] = None,
        download_dir: Optional[Union[str, Path]] = None,
        prompt: SavePrompt = prompt_for_path,
        max_workers: int = 4,
    ) -> None:
        self.pipeline = pipeline or ConversionPipeline()
        self.capabilities = capabilities or Capabilities()
        self.preferences: PreferenceStore = preferences or MemoryPreferenceStore()
        self.sink: PersistenceSink = sink or select_sink(
            self.capabilities,
            download_dir=download_dir or Path.cwd(),
            prompt=prompt,
            preferences=self.preferences,
        )
        self.max_workers = max(1, max_workers)

        self._lock = threading.Lock()
        self._files: List[SourceFile] = []
        self._progress: Dict[str, FileProgress] = {}
        self._options = options or ConversionOptions()
        self._converting = False
        self._generation = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def files(self) -> List[SourceFile]:
        with self._lock:
            return list(self._files)

    @property
    def file_progresses(self) -> List[FileProgress]:
        """Progress entries in file order."""
        with self._lock:
            return [self._progress[f.id] for f in self._files if f.id in self._progress]

    @property
    def options(self) -> ConversionOptions:
        return self._options

    @property
    def is_converting(self) -> bool:
        return self._converting

    def progress_for(self, file_id: str) -> Optional[FileProgress]:
        with self._lock:
            return self._progress.get(file_id)

    # ------------------------------------------------------------------
    # Batch editing
    # ------------------------------------------------------------------
    def add_files(self, new_files: Iterable[SourceFile], *, strict: bool = False) -> List[str]:
        """
        Append ``new_files``, skipping any whose name and size are already queued.

        Returns the names of the rejected duplicates. With ``strict`` the
        whole call is refused with :class:`DuplicateFileError` instead.
        """
        with self._lock:
            seen = {(f.name, f.size) for f in self._files}
            accepted: List[SourceFile] = []
            rejected: List[str] = []
            for candidate in new_files:
                key = (candidate.name, candidate.size)
                if key in seen:
                    rejected.append(candidate.name)
                    continue
                seen.add(key)
                accepted.append(candidate)

            if rejected and strict:
                raise DuplicateFileError(rejected)
            self._files.extend(accepted)

        if rejected:
            LOGGER.warning("Duplicate files detected: %s", ", ".join(rejected))
        if accepted:
            LOGGER.info("%d file(s) added", len(accepted))
        return rejected

    def add_paths(self, paths: Iterable[Union[str, Path]], *, strict: bool = False) -> List[str]:
        return self.add_files((SourceFile.from_path(p) for p in paths), strict=strict)

    def remove_file(self, index: int) -> SourceFile:
        """Remove the file at ``index`` together with its progress."""
        with self._lock:
            removed = self._files.pop(index)
            self._progress.pop(removed.id, None)
        LOGGER.info("Removed %s", removed.name)
        return removed

    def update_options(self, **changes: object) -> ConversionOptions:
        """
        Merge ``changes`` into the options.

        Any actual change discards every stored conversion, including results
        still being produced by a running pass.
        """
        with self._lock:
            previous = self._options
            self._options = previous.merged(**changes)
            if self._options != previous and self._progress:
                LOGGER.info(
                    "Options changed (%s, scale %.2f), resetting progress",
                    self._options.format.value,
                    self._options.scale,
                )
                self._progress = {}
                self._generation += 1
            return self._options

    def reset(self) -> None:
        """Drop all files and progress and restore the default options."""
        with self._lock:
            self._files = []
            self._progress = {}
            self._options = ConversionOptions()
            self._generation += 1

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    def _prepare_pass(self) -> Optional[Tuple[int, ConversionOptions, List[SourceFile], int]]:
        with self._lock:
            if not self._files or self._converting:
                return None
            self._converting = True

            working: Dict[str, FileProgress] = {}
            pending: List[SourceFile] = []
            for source in self._files:
                existing = self._progress.get(source.id)
                if existing is not None and existing.is_converted:
                    working[source.id] = existing
                else:
                    working[source.id] = FileProgress.pending(source)
                    pending.append(source)
            self._progress = working
            return self._generation, self._options, pending, len(self._files)

    def start_conversion(self, on_progress: Optional[ProgressObserver] = None) -> ConversionSummary:
        """
        Convert every file that has no images yet, concurrently.

        One file failing never stops the others; failures are recorded in
        the file's progress and in the returned summary.
        """
        prepared = self._prepare_pass()
        if prepared is None:
            return ConversionSummary(total=len(self._files))
        generation, options, pending, total = prepared

        summary = ConversionSummary(total=total, skipped=total - len(pending))
        try:
            if not pending:
                LOGGER.info("All files are already converted")
                return summary

            LOGGER.info("Converting %d new file(s)...", len(pending))
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._convert_one, source, options, generation, on_progress): source
                    for source in pending
                }
                for future in as_completed(futures):
                    source = futures[future]
                    status, error = future.result()
                    if status is ConversionStatus.COMPLETED:
                        summary.converted += 1
                    elif status is ConversionStatus.ERROR:
                        summary.failed += 1
                        summary.errors[source.name] = error

            LOGGER.info("Conversion completed: %s", summary)
            return summary
        finally:
            with self._lock:
                self._converting = False

    def _convert_one(
        self,
        source: SourceFile,
        options: ConversionOptions,
        generation: int,
        on_progress: Optional[ProgressObserver],
    ) -> Tuple[Optional[ConversionStatus], Optional[str]]:
        """Run one file; the status is ``None`` when the result arrived stale."""

        def report(progress: ConversionProgress) -> None:
            if self._apply_progress(source.id, generation, progress) and on_progress:
                on_progress(source.id, progress)

        try:
            images = self.pipeline.convert(source, options, report)
        except Exception as exc:
            message = describe_error(exc)
            LOGGER.error("Conversion error for %s: %s", source.name, message)
            if not self._mark_failed(source, generation, message):
                return None, None
            return ConversionStatus.ERROR, message

        if not self._apply_images(source.id, generation, images):
            return None, None
        return ConversionStatus.COMPLETED, None

    def _apply_progress(self, file_id: str, generation: int, progress: ConversionProgress) -> bool:
        with self._lock:
            entry = self._progress.get(file_id)
            if generation != self._generation or entry is None:
                return False
            entry.progress = progress
            return True

    def _apply_images(self, file_id: str, generation: int, images: List[EncodedImage]) -> bool:
        with self._lock:
            entry = self._progress.get(file_id)
            if generation != self._generation or entry is None:
                LOGGER.debug("Dropping stale results for %s", file_id)
                return False
            entry.images = list(images)
            return True

    def _mark_failed(self, source: SourceFile, generation: int, message: str) -> bool:
        with self._lock:
            entry = self._progress.get(source.id)
            if generation != self._generation or entry is None:
                return False
            if entry.progress.status is not ConversionStatus.ERROR:
                entry.progress = ConversionProgress(
                    current_page=entry.progress.current_page,
                    total_pages=entry.progress.total_pages,
                    file_name=source.name,
                    status=ConversionStatus.ERROR,
                    error=message,
                )
            return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_file(self, index: int) -> List[str]:
        """Save the images of the file at ``index``; no-op without images."""
        with self._lock:
            if not 0 <= index < len(self._files):
                return []
            entry = self._progress.get(self._files[index].id)
            options = self._options
        if entry is None or not entry.is_converted:
            return []

        items, archive_name = file_export(entry, options)
        return self.sink.save(items, archive_name=archive_name)

    def export_all_files(self) -> List[str]:
        """Save every converted file as one combined export."""
        items, archive_name = combined_export(self.file_progresses, self._options)
        if not items:
            return []
        return self.sink.save(items, archive_name=archive_name, always_archive=True)


__all__ = ["BatchOrchestrator", "ProgressObserver"]
