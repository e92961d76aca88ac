"""pdfsignvalidator error types."""

from __future__ import annotations

import os
from typing import Any

__all__ = [
    "CertificateDecodeError",
    "ConfigError",
    "DecodeError",
    "FileReadError",
    "MalformedRangeError",
    "PDFError",
    "ValidatorError",
]


class ValidatorError(Exception):
    """Base error for pdfsignvalidator operations."""


class FileReadError(ValidatorError):
    """An input file is missing or unreadable.

    Args:
        path: The file that could not be read.
        message: Human-readable error description.
    """

    def __init__(self, path: str | os.PathLike[str], message: str) -> None:
        super().__init__(message)
        self.path = os.fspath(path)

    def __reduce__(self) -> tuple[type[FileReadError], tuple[str, str]]:
        """Preserve the path across pickle/unpickle."""
        return (type(self), (self.path, str(self)))


class PDFError(ValidatorError):
    """PDF byte-level structure error."""


class MalformedRangeError(PDFError):
    """A ByteRange points outside the file or at an invalid hex string.

    Args:
        message: Human-readable error description.
        byte_range: The offending (start, end) pair, if known.
    """

    def __init__(self, message: str, *, byte_range: tuple[int, int] | None = None) -> None:
        super().__init__(message)
        self.byte_range = byte_range

    def __reduce__(self) -> tuple[type[MalformedRangeError], tuple[str], dict[str, Any]]:
        return (type(self), (str(self),), {"byte_range": self.byte_range})

    def __setstate__(self, state: dict[str, Any] | None) -> None:
        if state is None:
            return
        self.byte_range = state.get("byte_range")


class DecodeError(ValidatorError):
    """DER structure mismatch at the CMS/PKCS#7 or X.509 layer."""


class CertificateDecodeError(DecodeError):
    """The certificate object itself could not be constructed."""


class ConfigError(ValidatorError):
    """Configuration validation error."""
