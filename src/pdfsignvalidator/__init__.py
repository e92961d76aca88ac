"""
pdfsignvalidator -- Validate certificates behind PDF signatures.

Extracts the CMS/PKCS#7 signatures embedded in a PDF, decodes the signer
certificate, and checks it against trusted PEM certificates.
"""

from __future__ import annotations

from .api import (
    cert_is_valid,
    info_from_pdf,
    info_from_pem,
    sign_count,
    sign_is_valid,
    sign_match_subject,
)
from .constants import __version__
from .core import CertificateRecord, NameInfo, Validity
from .errors import (
    CertificateDecodeError,
    ConfigError,
    DecodeError,
    FileReadError,
    MalformedRangeError,
    PDFError,
    ValidatorError,
)

__all__ = [
    "CertificateDecodeError",
    "CertificateRecord",
    "ConfigError",
    "DecodeError",
    "FileReadError",
    "MalformedRangeError",
    "NameInfo",
    "PDFError",
    "Validity",
    "ValidatorError",
    "__version__",
    "cert_is_valid",
    "info_from_pdf",
    "info_from_pem",
    "sign_count",
    "sign_is_valid",
    "sign_match_subject",
]
