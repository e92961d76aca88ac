"""Tests for pdfsignvalidator.core.cert_info -- certificate normalization."""

from __future__ import annotations

import datetime
import logging
from unittest.mock import patch

import pytest
from conftest import NOT_AFTER, NOT_BEFORE, make_cert, make_name, to_der, to_pem
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from pdfsignvalidator.core import cert_info
from pdfsignvalidator.core.cert_info import (
    certificate_from_pem,
    load_certificate,
    normalize_certificate,
)
from pdfsignvalidator.core.records import NameInfo
from pdfsignvalidator.errors import CertificateDecodeError, DecodeError


def _spki(cert) -> bytes:
    return cert.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )


# ── normalize_certificate ───────────────────────────────────────────


def test_full_subject_and_issuer(pki):
    record = normalize_certificate(load_certificate(to_der(pki.alice)))
    assert record.subject == NameInfo(
        common_name="Alice",
        owner="Example Org",
        serial_number="CUIT 20123456789",
        country="AR",
    )
    assert record.issuer == NameInfo(
        common_name="Example Root CA",
        owner="Example Trust",
        serial_number=None,
        country="AR",
    )


def test_validity_is_utc(pki):
    record = normalize_certificate(load_certificate(to_der(pki.alice)))
    assert record.validity.from_ == NOT_BEFORE
    assert record.validity.to == NOT_AFTER
    assert record.validity.from_.utcoffset() == datetime.timedelta(0)


def test_public_key_and_signature(pki):
    record = normalize_certificate(load_certificate(to_der(pki.alice)))
    assert record.public_key == _spki(pki.alice)
    assert record.signature == pki.alice.signature.hex()


def test_missing_attributes_are_none(pki):
    record = normalize_certificate(load_certificate(to_der(pki.bob)))
    assert record.subject == NameInfo(common_name="Bob")
    assert record.issuer.common_name == "Example Root CA"


def test_field_failure_degrades_single_field(pki):
    """A decode error in one attribute must not abort the record."""
    real = cert_info._first_value_of

    def flaky(name, oid):
        if oid == "2.5.4.10":
            raise ValueError("bad BMPString")
        return real(name, oid)

    with patch("pdfsignvalidator.core.cert_info._first_value_of", side_effect=flaky):
        record = normalize_certificate(load_certificate(to_der(pki.alice)))

    assert record.subject.owner is None
    assert record.issuer.owner is None
    assert record.subject.common_name == "Alice"
    assert record.signature is not None


def test_soft_returns_none_and_logs(caplog: pytest.LogCaptureFixture):
    def boom():
        raise KeyError("nope")

    with caplog.at_level(logging.DEBUG, logger="pdfsignvalidator.core.cert_info"):
        assert cert_info._soft("subject.country", boom) is None
    assert "subject.country" in caplog.text


def test_first_value_wins():
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "First Org"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Second Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, "Multi"),
        ]
    )
    cert = make_cert(name, key.public_key(), name, key)
    record = normalize_certificate(load_certificate(to_der(cert)))
    assert record.subject.owner == "First Org"


def test_expired_certificate_warns(caplog: pytest.LogCaptureFixture):
    key = ec.generate_private_key(ec.SECP256R1())
    name = make_name("Old")
    cert = make_cert(
        name,
        key.public_key(),
        name,
        key,
        not_before=datetime.datetime(2001, 1, 1, tzinfo=datetime.timezone.utc),
        not_after=datetime.datetime(2002, 1, 1, tzinfo=datetime.timezone.utc),
    )
    with caplog.at_level(logging.WARNING, logger="pdfsignvalidator.core.cert_info"):
        record = normalize_certificate(load_certificate(to_der(cert)))
    assert "expired" in caplog.text
    assert record.validity.to is not None


def test_not_yet_valid_certificate_warns(caplog: pytest.LogCaptureFixture):
    key = ec.generate_private_key(ec.SECP256R1())
    name = make_name("Future")
    cert = make_cert(
        name,
        key.public_key(),
        name,
        key,
        not_before=datetime.datetime(2045, 1, 1, tzinfo=datetime.timezone.utc),
        not_after=datetime.datetime(2046, 1, 1, tzinfo=datetime.timezone.utc),
    )
    with caplog.at_level(logging.WARNING, logger="pdfsignvalidator.core.cert_info"):
        normalize_certificate(load_certificate(to_der(cert)))
    assert "not yet valid" in caplog.text


def test_to_dict_shape(pki):
    record = normalize_certificate(load_certificate(to_der(pki.alice)))
    data = record.to_dict()
    assert set(data) == {"subject", "issuer", "validity", "public_key", "signature"}
    assert set(data["subject"]) == {"common_name", "owner", "serial_number", "country"}
    assert data["validity"] == {"from": NOT_BEFORE, "to": NOT_AFTER}
    assert "certificate" not in data


def test_repr_hides_handle(pki):
    record = normalize_certificate(load_certificate(to_der(pki.alice)))
    assert "certificate=" not in repr(record)


# ── load_certificate ────────────────────────────────────────────────


def test_load_certificate_garbage():
    with pytest.raises(CertificateDecodeError, match="Failed to parse X.509"):
        load_certificate(b"\x30\x03\x02\x01\x01")


def test_load_certificate_empty():
    with pytest.raises(CertificateDecodeError):
        load_certificate(b"")


# ── certificate_from_pem ────────────────────────────────────────────


def test_pem_round_trip(pki):
    """The handle keeps the exact DER payload of the PEM file."""
    record = certificate_from_pem(to_pem(pki.alice))
    assert record.der == to_der(pki.alice)


def test_pem_idempotent(pki):
    first = certificate_from_pem(to_pem(pki.alice))
    second = certificate_from_pem(to_pem(pki.alice))
    assert first == second
    assert first.certificate is not second.certificate


def test_der_input_accepted(pki):
    assert certificate_from_pem(to_der(pki.root)).subject.common_name == "Example Root CA"


def test_pem_wrong_block_type(pki):
    pem = pki.alice.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    with pytest.raises(DecodeError, match="Expected a PEM CERTIFICATE block"):
        certificate_from_pem(pem)


def test_not_pem_not_der():
    with pytest.raises(DecodeError, match="neither a PEM certificate nor DER"):
        certificate_from_pem(b"hello world")


def test_corrupt_pem_payload():
    pem = b"-----BEGIN CERTIFICATE-----\nMIIBAA==\n-----END CERTIFICATE-----\n"
    with pytest.raises(DecodeError):
        certificate_from_pem(pem)
