"""Zip archive creation for converted images."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Iterable, Tuple, Union
from zipfile import ZIP_DEFLATED, ZipFile

from .exceptions import PersistenceError
from .types import EncodedImage, OutputItem

Payload = Union[bytes, bytearray, str, EncodedImage]
ArchiveEntry = Union[Tuple[str, Payload], OutputItem]


def payload_bytes(payload: Payload) -> bytes:
    """Return raw bytes for ``payload``; strings are base64 or ``data:`` URLs."""

    if isinstance(payload, EncodedImage):
        return payload.data
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    encoded = payload.split(",", 1)[1] if payload.startswith("data:") else payload
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PersistenceError(f"Invalid base64 image payload: {exc}") from exc


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Bundle ``(name, payload)`` entries, in order, into a zip archive."""

    buffer = io.BytesIO()
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        for entry in entries:
            if isinstance(entry, OutputItem):
                name, data = entry.name, entry.data
            else:
                name, data = entry[0], payload_bytes(entry[1])
            archive.writestr(name, data)
    return buffer.getvalue()


__all__ = ["build_archive", "payload_bytes"]
