"""ASN.1/DER helpers for walking CMS envelopes with ``asn1crypto.parser``."""

from __future__ import annotations

__all__ = [
    "CLASS_CONTEXT",
    "CLASS_UNIVERSAL",
    "TAG_SEQUENCE",
    "TAG_SET",
    "Tlv",
    "describe_tag",
    "iter_children",
    "parse_tlv",
    "strip_der_padding",
]

import logging
from typing import NamedTuple

from asn1crypto import parser as asn1_parser

from ...errors import DecodeError

_logger = logging.getLogger(__name__)

CLASS_UNIVERSAL = 0
CLASS_CONTEXT = 2

METHOD_CONSTRUCTED = 1

TAG_SEQUENCE = 16
TAG_SET = 17

_CLASS_NAMES = {0: "universal", 1: "application", 2: "context", 3: "private"}

_UNIVERSAL_NAMES = {
    1: "BOOLEAN",
    2: "INTEGER",
    3: "BIT STRING",
    4: "OCTET STRING",
    5: "NULL",
    6: "OBJECT IDENTIFIER",
    TAG_SEQUENCE: "SEQUENCE",
    TAG_SET: "SET",
}


class Tlv(NamedTuple):
    """One parsed tag-length-value element."""

    class_: int
    method: int
    tag: int
    header: bytes
    contents: bytes
    trailer: bytes

    @property
    def encoded(self) -> bytes:
        return self.header + self.contents + self.trailer

    @property
    def constructed(self) -> bool:
        return self.method == METHOD_CONSTRUCTED

    def is_(self, class_: int, tag: int) -> bool:
        return self.class_ == class_ and self.tag == tag


def describe_tag(class_: int, tag: int) -> str:
    """Human-readable tag name, e.g. ``universal SEQUENCE`` or ``context [0]``."""
    class_name = _CLASS_NAMES.get(class_, f"class {class_}")
    if class_ == CLASS_UNIVERSAL:
        return f"{class_name} {_UNIVERSAL_NAMES.get(tag, f'tag {tag}')}"
    return f"{class_name} [{tag}]"


def parse_tlv(data: bytes, what: str) -> Tlv:
    """Parse the first TLV element of ``data``.

    Trailing bytes after the element are ignored.

    Raises:
        DecodeError: If no complete element can be parsed.
    """
    if not data:
        raise DecodeError(f"{what}: empty input")
    try:
        return Tlv(*asn1_parser.parse(data, strict=False))
    except ValueError as e:
        raise DecodeError(f"{what}: invalid DER encoding: {e}") from e


def iter_children(parent: Tlv, what: str) -> list[Tlv]:
    """Split the contents of a constructed element into its child elements.

    Raises:
        DecodeError: If ``parent`` is primitive or a child is truncated.
    """
    if not parent.constructed:
        raise DecodeError(
            f"{what}: expected a constructed value, found primitive "
            f"{describe_tag(parent.class_, parent.tag)}"
        )
    children: list[Tlv] = []
    contents = parent.contents
    pointer = 0
    while pointer < len(contents):
        # End-of-contents marker of an indefinite-length (BER) parent
        if contents[pointer : pointer + 2] == b"\x00\x00":
            break
        try:
            length = asn1_parser.peek(contents[pointer:])
        except ValueError as e:
            raise DecodeError(f"{what}: truncated element at offset {pointer}: {e}") from e
        children.append(parse_tlv(contents[pointer : pointer + length], what))
        pointer += length
    return children


def strip_der_padding(blob: bytes) -> bytes:
    """Cut the zero padding PDF producers append after a CMS blob.

    The /Contents hex string is reserved before signing and zero-filled,
    so the DER value is usually followed by a run of 0x00 bytes.  The
    exact length comes from the outer TLV header rather than from
    stripping zeros, which would corrupt blobs ending in 0x00.

    Raises:
        DecodeError: If the outer TLV header is malformed.
    """
    if not blob:
        raise DecodeError("CMS blob is empty")
    try:
        length = asn1_parser.peek(blob)
    except ValueError as e:
        raise DecodeError(f"CMS blob: invalid DER header: {e}") from e

    trailing = blob[length:]
    if trailing.strip(b"\x00"):
        _logger.debug("CMS blob followed by %d non-zero trailing bytes", len(trailing))
    return blob[:length]
