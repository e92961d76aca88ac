"""Core pipeline: byte-range scanning, CMS extraction, normalization, trust."""

from __future__ import annotations

from .cert_info import certificate_from_pem, load_certificate, normalize_certificate
from .cms import decode_certificate, list_certificates, select_signer_certificate
from .records import CertificateRecord, NameInfo, Validity
from .trust import (
    cert_is_valid,
    certificates_equal,
    resolve_field,
    select_record,
    sign_is_valid,
    sign_match_subject,
    verify_issued_by,
)

__all__ = [
    "CertificateRecord",
    "NameInfo",
    "Validity",
    "cert_is_valid",
    "certificate_from_pem",
    "certificates_equal",
    "decode_certificate",
    "list_certificates",
    "load_certificate",
    "normalize_certificate",
    "resolve_field",
    "select_record",
    "select_signer_certificate",
    "sign_is_valid",
    "sign_match_subject",
    "verify_issued_by",
]
