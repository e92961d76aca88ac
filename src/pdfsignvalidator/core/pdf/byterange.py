"""ByteRange scanning and CMS blob extraction from signed PDFs."""

from __future__ import annotations

__all__ = [
    "BYTERANGE_PATTERN",
    "ByteRange",
    "count_signatures",
    "extract_blob",
    "scan_byteranges",
]

import logging
import re
from typing import NamedTuple

from ...constants import DEFAULT_MAX_CMS_SIZE
from ...errors import MalformedRangeError

_logger = logging.getLogger(__name__)

# Regex pattern to find ByteRange arrays in PDF: [off1 len1 off2 len2].
# The fourth number is optional; only len1 and off2 bound the hex blob.
BYTERANGE_PATTERN = re.compile(rb"ByteRange\s*\[\s*(\d+)\s+(\d+)\s+(\d+)(?:\s+(\d+))?\s*\]")

_WHITESPACE = re.compile(rb"\s+")


class ByteRange(NamedTuple):
    """Hex-blob boundaries of one signature.

    ``start`` is ByteRange[1] (offset of the ``<`` delimiter) and ``end`` is
    ByteRange[2] (offset just past the ``>`` delimiter).
    """

    start: int
    end: int
    offset: int = 0
    raw: tuple[int, ...] = ()


def _from_match(match: re.Match[bytes]) -> ByteRange:
    raw = tuple(int(g) for g in match.groups() if g is not None)
    return ByteRange(start=raw[1], end=raw[2], offset=match.start(), raw=raw)


def scan_byteranges(pdf_bytes: bytes) -> list[ByteRange]:
    """Find every ByteRange marker, in document order.

    The scan is purely textual; no PDF object parsing is done.

    Returns:
        One ByteRange per marker, or an empty list for unsigned files.
    """
    return [_from_match(m) for m in BYTERANGE_PATTERN.finditer(pdf_bytes)]


def count_signatures(pdf_bytes: bytes) -> int:
    """Count ByteRange markers carrying at least three integers.

    Placeholders such as ``/ByteRange [0 /********** ...]`` never match, so
    this always equals ``len(scan_byteranges(pdf_bytes))``.
    """
    return sum(1 for _ in BYTERANGE_PATTERN.finditer(pdf_bytes))


def extract_blob(
    pdf_bytes: bytes,
    byte_range: ByteRange,
    max_size: int = DEFAULT_MAX_CMS_SIZE,
) -> bytes:
    """
    Extract the raw CMS blob advertised by one ByteRange.

    Reads ``end - start - 2`` bytes from ``start + 1``, i.e. the hex string
    between the ``<`` and ``>`` delimiters, and hex-decodes it.

    Args:
        pdf_bytes: Complete PDF file bytes.
        byte_range: A ByteRange from :func:`scan_byteranges`.
        max_size: Largest accepted decoded blob, in bytes.

    Returns:
        Decoded CMS bytes, still carrying any zero padding.

    Raises:
        MalformedRangeError: If the bounds are inverted or out of the file,
            the blob is too large, or the hex string is odd-length or invalid.
    """
    start, end = byte_range.start, byte_range.end
    bounds = (start, end)

    if end <= start:
        raise MalformedRangeError(
            f"Invalid ByteRange: end ({end}) must be greater than start ({start})",
            byte_range=bounds,
        )
    if end > len(pdf_bytes):
        raise MalformedRangeError(
            f"Invalid ByteRange: end ({end}) exceeds PDF size ({len(pdf_bytes)})",
            byte_range=bounds,
        )
    hex_len = end - start - 2
    if hex_len < 0:
        raise MalformedRangeError(
            f"Invalid ByteRange: no room for a hex string between {start} and {end}",
            byte_range=bounds,
        )
    if hex_len > max_size * 2:
        raise MalformedRangeError(
            f"ByteRange claims {hex_len // 2} bytes, exceeds maximum ({max_size} bytes)",
            byte_range=bounds,
        )

    if pdf_bytes[start : start + 1] != b"<" or pdf_bytes[end - 1 : end] != b">":
        _logger.warning(
            "ByteRange [%d %d] is not enclosed by '<' '>' delimiters (found %r, %r)",
            start,
            end,
            pdf_bytes[start : start + 1],
            pdf_bytes[end - 1 : end],
        )

    hex_bytes = _WHITESPACE.sub(b"", pdf_bytes[start + 1 : start + 1 + hex_len])
    if len(hex_bytes) % 2:
        raise MalformedRangeError(
            f"Odd-length hex string ({len(hex_bytes)} chars) at ByteRange [{start} {end}]",
            byte_range=bounds,
        )
    try:
        return bytes.fromhex(hex_bytes.decode("ascii"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRangeError(
            f"Invalid hex in CMS blob at ByteRange [{start} {end}]: {e}",
            byte_range=bounds,
        ) from e
