# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
CMS/PKCS#7 signer-certificate extraction.

Walks ``ContentInfo -> [0] SignedData -> [0] certificates`` tag by tag so
that structural mismatches are reported with the tag that was expected
and the tag that was found, then hands the chosen certificate to the
normalizer.
"""

from __future__ import annotations

__all__ = [
    "decode_certificate",
    "list_certificates",
    "select_signer_certificate",
]

import logging

from asn1crypto import x509 as asn1_x509

from ..config import resolve_signer_policy
from ..errors import DecodeError
from .cert_info import load_certificate, normalize_certificate
from .pdf.asn1 import (
    CLASS_CONTEXT,
    CLASS_UNIVERSAL,
    TAG_SEQUENCE,
    Tlv,
    describe_tag,
    iter_children,
    parse_tlv,
    strip_der_padding,
)
from .records import CertificateRecord

_logger = logging.getLogger(__name__)


def _expect(tlv: Tlv, class_: int, tag: int, what: str) -> Tlv:
    if not tlv.is_(class_, tag):
        raise DecodeError(
            f"{what}: expected {describe_tag(class_, tag)}, "
            f"found {describe_tag(tlv.class_, tlv.tag)}"
        )
    return tlv


def _first_tagged(parent: Tlv, tag: int, what: str) -> Tlv:
    for child in iter_children(parent, what):
        if child.is_(CLASS_CONTEXT, tag):
            return child
    found = ", ".join(describe_tag(c.class_, c.tag) for c in iter_children(parent, what))
    raise DecodeError(
        f"{what}: expected {describe_tag(CLASS_CONTEXT, tag)}, found only [{found or 'nothing'}]"
    )


def _certificate_elements(blob: bytes) -> list[Tlv]:
    content_info = _expect(
        parse_tlv(strip_der_padding(blob), "ContentInfo"),
        CLASS_UNIVERSAL,
        TAG_SEQUENCE,
        "ContentInfo",
    )

    # content [0] EXPLICIT -> the SignedData SEQUENCE
    explicit = _first_tagged(content_info, 0, "ContentInfo")
    inner = iter_children(explicit, "ContentInfo.content")
    if not inner:
        raise DecodeError("ContentInfo.content: expected universal SEQUENCE, found nothing")
    signed_data = _expect(inner[0], CLASS_UNIVERSAL, TAG_SEQUENCE, "SignedData")

    # certificates [0] IMPLICIT SET OF CertificateChoices
    cert_set = _first_tagged(signed_data, 0, "SignedData")
    elements = iter_children(cert_set, "SignedData.certificates")
    if not elements:
        raise DecodeError("SignedData.certificates: expected at least one certificate, found none")
    return elements


def _certificate_sequences(blob: bytes) -> list[Tlv]:
    elements = _certificate_elements(blob)
    sequences = []
    for index, element in enumerate(elements):
        # Other CertificateChoices (attribute certs etc.) are tagged, not SEQUENCE
        if not element.is_(CLASS_UNIVERSAL, TAG_SEQUENCE):
            _logger.debug(
                "Skipping certificates[%d]: %s", index, describe_tag(element.class_, element.tag)
            )
            continue
        sequences.append(element)
    if not sequences:
        last = elements[-1]
        raise DecodeError(
            "SignedData.certificates: expected universal SEQUENCE, "
            f"found {describe_tag(last.class_, last.tag)}"
        )
    return sequences


def list_certificates(blob: bytes) -> list[asn1_x509.Certificate]:
    """
    Decode every certificate embedded in a CMS SignedData blob.

    Args:
        blob: DER (or BER) CMS bytes, trailing zero padding allowed.

    Returns:
        Certificates in the order they appear in the set.

    Raises:
        DecodeError: On any structural mismatch or an empty certificate set.
        CertificateDecodeError: If any certificate of the set cannot be constructed.
    """
    return [load_certificate(element.encoded) for element in _certificate_sequences(blob)]


def _leaf_index(certs: list[asn1_x509.Certificate]) -> int | None:
    candidates = []
    for i, cert in enumerate(certs):
        issues_other = any(
            j != i and other.issuer.dump() == cert.subject.dump() for j, other in enumerate(certs)
        )
        if not issues_other:
            candidates.append(i)
    if len(candidates) == 1:
        return candidates[0]
    return None


def select_signer_certificate(
    certs: list[asn1_x509.Certificate], policy: str | None = None
) -> asn1_x509.Certificate:
    """
    Pick the signer's certificate out of the embedded set.

    Args:
        certs: Non-empty certificate list from :func:`list_certificates`.
        policy: ``last``, ``first`` or ``leaf``; None uses the configured default.

    Raises:
        ConfigError: If ``policy`` is not a known policy name.
        DecodeError: If ``certs`` is empty.
    """
    policy = resolve_signer_policy(policy)
    if not certs:
        raise DecodeError("No certificates to select a signer from")

    if policy == "first":
        return certs[0]
    if policy == "leaf":
        index = _leaf_index(certs)
        if index is not None:
            return certs[index]
        _logger.debug("No unique leaf among %d certificates, using the last one", len(certs))
    return certs[-1]


def decode_certificate(blob: bytes, policy: str | None = None) -> CertificateRecord:
    """
    Extract and normalize the signer certificate of a CMS blob.

    By default the LAST certificate of the set is taken as the signer's,
    which is where common PDF signing tools place it.  See
    :func:`select_signer_certificate` for the other policies.

    Under ``first`` and ``last`` only the chosen certificate is constructed,
    so a broken chain member elsewhere in the set is ignored.  ``leaf``
    compares names across the whole set and needs every member to decode.

    Raises:
        ConfigError: If ``policy`` is not a known policy name.
        DecodeError: On structural mismatch.
        CertificateDecodeError: If a certificate that has to be read cannot be constructed.
    """
    policy = resolve_signer_policy(policy)
    if policy == "leaf":
        cert = select_signer_certificate(list_certificates(blob), policy)
    else:
        sequences = _certificate_sequences(blob)
        chosen = sequences[0] if policy == "first" else sequences[-1]
        cert = load_certificate(chosen.encoded)
    return normalize_certificate(cert)
