"""Byte-level PDF signature location and blob extraction."""

from .asn1 import strip_der_padding
from .byterange import (
    BYTERANGE_PATTERN,
    ByteRange,
    count_signatures,
    extract_blob,
    scan_byteranges,
)

__all__ = [
    "BYTERANGE_PATTERN",
    "ByteRange",
    "count_signatures",
    "extract_blob",
    "scan_byteranges",
    "strip_der_padding",
]
