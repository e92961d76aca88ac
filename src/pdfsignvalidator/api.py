"""High-level file-based API.

Each function reads its input files, runs the scan -> extract -> normalize
pipeline, and evaluates trust.  For in-memory data use the functions in
:mod:`pdfsignvalidator.core` directly.
"""

from __future__ import annotations

__all__ = [
    "cert_is_valid",
    "info_from_pdf",
    "info_from_pem",
    "read_file",
    "records_from_pdf_bytes",
    "select_pdf_record",
    "sign_count",
    "sign_is_valid",
    "sign_match_subject",
]

import logging
import os
from typing import Union

from .config import get_settings
from .core import cms, trust
from .core.cert_info import certificate_from_pem
from .core.pdf import count_signatures, extract_blob, scan_byteranges
from .core.records import CertificateRecord
from .core.trust import Selector
from .errors import FileReadError, ValidatorError

_logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]


def read_file(path: PathArg) -> bytes:
    """Read a whole input file; the handle is closed on every exit path.

    Raises:
        FileReadError: If the file is missing or unreadable.
    """
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as e:
        raise FileReadError(path, f"Couldn't open file {os.fspath(path)}: {e}") from e


def records_from_pdf_bytes(
    pdf_bytes: bytes,
    *,
    strict: bool = True,
    policy: str | None = None,
) -> list[CertificateRecord]:
    """
    Decode the signer certificate of every signature in a PDF.

    Args:
        pdf_bytes: Raw PDF bytes.
        strict: Raise on the first broken signature.  When False, broken
            signatures are logged and skipped so the others still decode.
        policy: Signer-certificate policy (see :mod:`pdfsignvalidator.core.cms`).

    Returns:
        One record per decodable signature, in document order.

    Raises:
        MalformedRangeError: Bad ByteRange bounds or hex (strict mode).
        DecodeError: CMS/X.509 structure mismatch (strict mode).
        ConfigError: Unknown ``policy``.
    """
    max_size = get_settings().max_cms_size
    records = []
    for index, byte_range in enumerate(scan_byteranges(pdf_bytes)):
        try:
            blob = extract_blob(pdf_bytes, byte_range, max_size)
            records.append(cms.decode_certificate(blob, policy))
        except ValidatorError as exc:
            if strict:
                raise
            _logger.warning("Skipping signature %d (extraction failed): %s", index + 1, exc)
    return records


def sign_count(pdf_path: PathArg) -> int:
    """Number of ByteRange signature markers in a PDF file."""
    return count_signatures(read_file(pdf_path))


def info_from_pdf(
    pdf_path: PathArg,
    *,
    strict: bool = True,
    policy: str | None = None,
) -> list[CertificateRecord]:
    """
    Read the signer certificates attached to a PDF file.

    Returns:
        One record per signature, empty for an unsigned PDF.

    Raises:
        FileReadError: If the file cannot be read.
        MalformedRangeError, DecodeError: See :func:`records_from_pdf_bytes`.
    """
    return records_from_pdf_bytes(read_file(pdf_path), strict=strict, policy=policy)


def info_from_pem(pem_path: PathArg) -> CertificateRecord:
    """
    Read a certificate in PEM format.

    Raises:
        FileReadError: If the file cannot be read.
        DecodeError: If it holds no certificate.
    """
    return certificate_from_pem(read_file(pem_path))


def select_pdf_record(
    pdf_bytes: bytes,
    selector: Selector | None = None,
    *,
    policy: str | None = None,
) -> CertificateRecord | None:
    """
    Pick the signature a check applies to.

    Without a selector the last ByteRange of the document is decoded
    strictly: a broken newest signature is an error, never a fallback to
    an older one.  With a selector, broken signatures are skipped and the
    first decodable signature matching it is returned.

    Returns:
        The selected record, or None for an unsigned PDF or no match.

    Raises:
        MalformedRangeError, DecodeError: The last signature is broken
            (no selector only).
    """
    if selector:
        records = records_from_pdf_bytes(pdf_bytes, strict=False, policy=policy)
        return trust.select_record(records, selector)

    ranges = scan_byteranges(pdf_bytes)
    if not ranges:
        return None
    blob = extract_blob(pdf_bytes, ranges[-1], get_settings().max_cms_size)
    return cms.decode_certificate(blob, policy)


def sign_is_valid(pdf_path: PathArg, pem_path: PathArg, selector: Selector | None = None) -> bool:
    """
    Validate that the PDF signer certificate was issued by the PEM certificate.

    Args:
        pdf_path: Signed PDF file.
        pem_path: Issuer certificate (PEM).
        selector: Optional ``{"dot.path": value}`` choosing the signature;
            default is the last one.

    Raises:
        FileReadError: If either file cannot be read.
        MalformedRangeError, DecodeError: See :func:`select_pdf_record`.
    """
    issuer = info_from_pem(pem_path)
    selected = select_pdf_record(read_file(pdf_path), selector)
    if selected is None:
        return False
    return trust.verify_issued_by(selected, issuer)


def cert_is_valid(subject_pem_path: PathArg, issuer_pem_path: PathArg) -> bool:
    """Validate that the subject PEM certificate was issued by the issuer PEM certificate."""
    return trust.cert_is_valid(info_from_pem(subject_pem_path), info_from_pem(issuer_pem_path))


def sign_match_subject(
    pdf_path: PathArg, pem_path: PathArg, selector: Selector | None = None
) -> bool:
    """
    Validate that the PDF signer certificate is exactly the PEM certificate.

    Args:
        pdf_path: Signed PDF file.
        pem_path: Subject certificate (PEM).
        selector: See :func:`sign_is_valid`.

    Raises:
        FileReadError, MalformedRangeError, DecodeError: See :func:`sign_is_valid`.
    """
    subject = info_from_pem(pem_path)
    selected = select_pdf_record(read_file(pdf_path), selector)
    if selected is None:
        return False
    return trust.certificates_equal(selected, subject)
