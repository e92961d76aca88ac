# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Trust evaluation between certificate records.

Two kinds of check:

- issuance: does the issuer's public key verify the certificate's own
  signature over its ``tbsCertificate``?
- identity: is the certificate byte-for-byte the same as another one?

A failed check is a normal ``False``, never an exception.  Selection of one
record among several signatures uses dot-paths into the record mapping,
e.g. ``{"subject.common_name": "Alice"}``.
"""

from __future__ import annotations

__all__ = [
    "cert_is_valid",
    "certificates_equal",
    "resolve_field",
    "select_record",
    "sign_is_valid",
    "sign_match_subject",
    "verify_issued_by",
]

import datetime
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from asn1crypto import algos as asn1_algos
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, padding, rsa

from .records import CertificateRecord

_logger = logging.getLogger(__name__)

Selector = Mapping[str, Any]

_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


# ── Field-path selection ─────────────────────────────────────────────


def _lookup(node: Any, parts: Sequence[str], path: str) -> Any:
    if not parts:
        return node
    head = parts[0]
    if not isinstance(node, Mapping) or head not in node:
        raise KeyError(path)
    return _lookup(node[head], parts[1:], path)


def resolve_field(record: CertificateRecord, path: str) -> Any:
    """Resolve a dot-path such as ``issuer.common_name`` against a record.

    Raises:
        KeyError: If any segment of the path does not exist.
    """
    return _lookup(record.to_dict(), path.split("."), path)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _parse_iso(text: str) -> datetime.datetime:
    # fromisoformat only accepts the "Z" suffix from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


def _values_equal(actual: Any, expected: Any) -> bool:
    if isinstance(actual, datetime.datetime):
        if isinstance(expected, str):
            try:
                expected = _parse_iso(expected.strip())
            except ValueError:
                return False
        if isinstance(expected, datetime.datetime):
            return _as_utc(actual) == _as_utc(expected)
        return False
    return bool(actual == expected)


def _matches(record: CertificateRecord, selector: Selector) -> bool:
    for path, expected in selector.items():
        try:
            actual = resolve_field(record, path)
        except KeyError:
            return False
        if not _values_equal(actual, expected):
            return False
    return True


def select_record(
    records: Sequence[CertificateRecord], selector: Selector | None = None
) -> CertificateRecord | None:
    """
    Pick one record out of a PDF's signatures.

    Args:
        records: Records in document order.
        selector: Mapping of dot-path -> expected value.  Every entry must
            match.  None or empty selects the last (most recent) signature.

    Returns:
        The first matching record, or None if nothing was selected.
    """
    if not selector:
        return records[-1] if records else None
    for record in records:
        if _matches(record, selector):
            return record
    _logger.debug("No signature matches selector %r", dict(selector))
    return None


# ── Signature verification ───────────────────────────────────────────


def _hash(name: str) -> hashes.HashAlgorithm:
    try:
        return _HASHES[name]()
    except KeyError:
        raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {name}") from None


def _verify_with_key(
    key: Any,
    algorithm: asn1_algos.SignedDigestAlgorithm,
    signature: bytes,
    data: bytes,
) -> None:
    """Raise InvalidSignature / TypeError / UnsupportedAlgorithm on failure."""
    sig_algo = algorithm.signature_algo

    if sig_algo == "rsassa_pkcs1v15":
        if not isinstance(key, rsa.RSAPublicKey):
            raise TypeError(f"RSA signature but issuer key is {type(key).__name__}")
        key.verify(signature, data, padding.PKCS1v15(), _hash(algorithm.hash_algo))
    elif sig_algo == "rsassa_pss":
        if not isinstance(key, rsa.RSAPublicKey):
            raise TypeError(f"RSA-PSS signature but issuer key is {type(key).__name__}")
        params = algorithm["parameters"]
        mgf_hash = params["mask_gen_algorithm"]["parameters"]["algorithm"].native
        key.verify(
            signature,
            data,
            padding.PSS(mgf=padding.MGF1(_hash(mgf_hash)), salt_length=params["salt_length"].native),
            _hash(params["hash_algorithm"]["algorithm"].native),
        )
    elif sig_algo == "ecdsa":
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise TypeError(f"ECDSA signature but issuer key is {type(key).__name__}")
        key.verify(signature, data, ec.ECDSA(_hash(algorithm.hash_algo)))
    elif sig_algo == "dsa":
        if not isinstance(key, dsa.DSAPublicKey):
            raise TypeError(f"DSA signature but issuer key is {type(key).__name__}")
        key.verify(signature, data, _hash(algorithm.hash_algo))
    elif sig_algo in ("ed25519", "ed448"):
        if not isinstance(key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            raise TypeError(f"EdDSA signature but issuer key is {type(key).__name__}")
        key.verify(signature, data)
    else:
        raise UnsupportedAlgorithm(f"Unsupported signature algorithm: {sig_algo}")


def _issuer_key_der(issuer: CertificateRecord | bytes) -> bytes | None:
    if isinstance(issuer, CertificateRecord):
        return issuer.public_key
    return bytes(issuer)


def verify_issued_by(record: CertificateRecord, issuer: CertificateRecord | bytes) -> bool:
    """
    Check that ``issuer``'s public key produced ``record``'s signature.

    Args:
        record: The certificate to check.
        issuer: Issuer certificate record, or raw SubjectPublicKeyInfo DER.

    Returns:
        True if the signature verifies.  A wrong key, a key of another type,
        an unsupported algorithm or a malformed key all give False.
    """
    key_der = _issuer_key_der(issuer)
    if key_der is None:
        _logger.debug("Issuer has no usable public key")
        return False

    cert = record.certificate
    try:
        key = serialization.load_der_public_key(key_der)
        _verify_with_key(
            key,
            cert["signature_algorithm"],
            bytes(cert["signature_value"].native),
            cert["tbs_certificate"].dump(),
        )
    except InvalidSignature:
        _logger.debug("Certificate signature does not verify with the issuer key")
        return False
    except (UnsupportedAlgorithm, TypeError, ValueError, KeyError) as e:
        _logger.debug("Certificate signature cannot be verified: %s", e)
        return False
    return True


def certificates_equal(a: CertificateRecord, b: CertificateRecord) -> bool:
    """Byte-exact comparison of the two certificates' DER encodings."""
    return a.der == b.der


# ── Record-level operations ──────────────────────────────────────────


def sign_is_valid(
    pdf_records: Sequence[CertificateRecord],
    issuer_record: CertificateRecord,
    selector: Selector | None = None,
) -> bool:
    """Verify the selected PDF signer certificate against an issuer."""
    selected = select_record(pdf_records, selector)
    if selected is None:
        return False
    return verify_issued_by(selected, issuer_record)


def cert_is_valid(subject_record: CertificateRecord, issuer_record: CertificateRecord) -> bool:
    """Verify one certificate against an issuer, no PDF involved."""
    return verify_issued_by(subject_record, issuer_record)


def sign_match_subject(
    pdf_records: Sequence[CertificateRecord],
    subject_record: CertificateRecord,
    selector: Selector | None = None,
) -> bool:
    """Check that the selected PDF signer certificate IS ``subject_record``."""
    selected = select_record(pdf_records, selector)
    if selected is None:
        return False
    return certificates_equal(selected, subject_record)
