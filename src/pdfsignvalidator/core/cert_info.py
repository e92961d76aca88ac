# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Certificate normalization: asn1crypto certificates -> CertificateRecord.

Field extraction is best-effort.  A missing DN attribute or an
undecodable value leaves that single field as None; only the
certificate object itself is mandatory.
"""

from __future__ import annotations

__all__ = [
    "certificate_from_pem",
    "load_certificate",
    "normalize_certificate",
]

import datetime
import logging
from typing import Callable, TypeVar

from asn1crypto import pem as asn1_pem
from asn1crypto import x509 as asn1_x509

from ..constants import ASN1_SEQUENCE_TAG, PEM_CERTIFICATE_TYPE
from ..errors import CertificateDecodeError, DecodeError
from .records import CertificateRecord, NameInfo, Validity

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")

# OIDs for the distinguished-name attributes we keep
_OID_CN = "2.5.4.3"
_OID_SERIAL = "2.5.4.5"
_OID_COUNTRY = "2.5.4.6"
_OID_ORG = "2.5.4.10"

# Errors asn1crypto raises for absent or badly encoded values
_FIELD_ERRORS = (KeyError, ValueError, TypeError, AttributeError, IndexError)


def _soft(label: str, getter: Callable[[], _T]) -> _T | None:
    """Run one field getter, turning any decode failure into None."""
    try:
        return getter()
    except _FIELD_ERRORS as e:
        _logger.debug("Certificate field %s unavailable: %s", label, e)
        return None


def _first_value_of(name: asn1_x509.Name, oid: str) -> str:
    """First value of ``oid`` in DN order.

    Raises:
        KeyError: If the name carries no such attribute.
    """
    for rdn in name.chosen:
        for attr in rdn:
            if attr["type"].dotted == oid:
                return str(attr["value"].native)
    raise KeyError(f"attribute {oid} not present")


def _name_info(name_getter: Callable[[], asn1_x509.Name], label: str) -> NameInfo:
    name = _soft(label, name_getter)
    if name is None:
        return NameInfo()
    return NameInfo(
        common_name=_soft(f"{label}.common_name", lambda: _first_value_of(name, _OID_CN)),
        owner=_soft(f"{label}.owner", lambda: _first_value_of(name, _OID_ORG)),
        serial_number=_soft(f"{label}.serial_number", lambda: _first_value_of(name, _OID_SERIAL)),
        country=_soft(f"{label}.country", lambda: _first_value_of(name, _OID_COUNTRY)),
    )


def _validity_bound(cert: asn1_x509.Certificate, key: str) -> datetime.datetime:
    value = cert["tbs_certificate"]["validity"][key].native
    if not isinstance(value, datetime.datetime):
        raise TypeError(f"{key} is not a timestamp: {value!r}")
    return value.astimezone(datetime.timezone.utc)


def _warn_if_outside_validity(validity: Validity) -> None:
    now = datetime.datetime.now(datetime.timezone.utc)
    if validity.from_ and now < validity.from_:
        _logger.warning("Certificate is not yet valid (notBefore: %s)", validity.from_)
    elif validity.to and now > validity.to:
        _logger.warning("Certificate has expired (notAfter: %s)", validity.to)


def load_certificate(cert_der: bytes) -> asn1_x509.Certificate:
    """
    Construct the asn1crypto certificate object from DER bytes.

    Raises:
        CertificateDecodeError: If the bytes are not an X.509 certificate.
    """
    try:
        cert = asn1_x509.Certificate.load(cert_der)
        # asn1crypto parses lazily; touch the mandatory parts now
        cert["tbs_certificate"]
        cert["signature_algorithm"]
    except (ValueError, TypeError, KeyError, OSError) as e:
        raise CertificateDecodeError(f"Failed to parse X.509 certificate: {e}") from e
    return cert


def normalize_certificate(cert: asn1_x509.Certificate) -> CertificateRecord:
    """Project a decoded certificate onto a CertificateRecord.

    Never raises for individual fields; see module docstring.
    """
    validity = Validity(
        from_=_soft("validity.from", lambda: _validity_bound(cert, "not_before")),
        to=_soft("validity.to", lambda: _validity_bound(cert, "not_after")),
    )
    _warn_if_outside_validity(validity)

    return CertificateRecord(
        certificate=cert,
        subject=_name_info(lambda: cert["tbs_certificate"]["subject"], "subject"),
        issuer=_name_info(lambda: cert["tbs_certificate"]["issuer"], "issuer"),
        validity=validity,
        public_key=_soft(
            "public_key", lambda: cert["tbs_certificate"]["subject_public_key_info"].dump()
        ),
        signature=_soft("signature", lambda: bytes(cert["signature_value"].native).hex()),
    )


def certificate_from_pem(data: bytes) -> CertificateRecord:
    """
    Decode a PEM (or raw DER) certificate into a CertificateRecord.

    Args:
        data: File contents.  A ``CERTIFICATE`` PEM block is expected;
            bytes starting with an ASN.1 SEQUENCE tag are taken as DER.

    Raises:
        DecodeError: If the input holds no certificate block.
        CertificateDecodeError: If the certificate cannot be constructed.
    """
    if asn1_pem.detect(data):
        try:
            type_name, _headers, der = asn1_pem.unarmor(data)
        except ValueError as e:
            raise DecodeError(f"Invalid PEM data: {e}") from e
        if type_name != PEM_CERTIFICATE_TYPE:
            raise DecodeError(f"Expected a PEM {PEM_CERTIFICATE_TYPE} block, found {type_name!r}")
    elif data[:1] == bytes([ASN1_SEQUENCE_TAG]):
        der = data
    else:
        raise DecodeError("Input is neither a PEM certificate nor DER data")

    return normalize_certificate(load_certificate(der))
