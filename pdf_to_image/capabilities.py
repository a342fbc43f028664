"""Host capability detection."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, TextIO

NATIVE_FS_ENV = "PDF_TO_IMAGE_NATIVE_FS"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Capabilities:
    """
    What the host can do for output persistence.

    Attributes:
        native_filesystem: The user can be prompted for a save location
    """
    native_filesystem: bool = False


def _is_tty(stream: Optional[TextIO]) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def detect_capabilities(
    environ: Optional[Mapping[str, str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> Capabilities:
    """
    Detect host capabilities. Safe to call any number of times.

    ``PDF_TO_IMAGE_NATIVE_FS`` forces the answer; otherwise an interactive
    terminal on both stdin and stdout counts as native filesystem access.
    """
    environ = os.environ if environ is None else environ
    override = environ.get(NATIVE_FS_ENV, "").strip().lower()
    if override in _TRUTHY:
        return Capabilities(native_filesystem=True)
    if override in _FALSY:
        return Capabilities(native_filesystem=False)

    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    return Capabilities(native_filesystem=_is_tty(stdin) and _is_tty(stdout))


__all__ = ["Capabilities", "detect_capabilities", "NATIVE_FS_ENV"]
