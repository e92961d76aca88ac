"""Shared test fixtures for the pdfsignvalidator test suite.

Certificates are generated on the fly with ``cryptography``; CMS envelopes
are DER-encoded by hand; signed PDFs are built byte by byte with
real /ByteRange and /Contents entries.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import NameOID

if TYPE_CHECKING:
    from pathlib import Path

NOT_BEFORE = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
NOT_AFTER = datetime.datetime(2044, 1, 1, tzinfo=datetime.timezone.utc)

PDF_HEADER = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"

_BR_SLOT = b"[0000000000 0000000000 0000000000 0000000000]"

OID_SIGNED_DATA = bytes.fromhex("06092a864886f70d010702")
OID_DATA = bytes.fromhex("06092a864886f70d010701")


def make_name(
    cn: str,
    org: str | None = None,
    country: str | None = None,
    serial: str | None = None,
) -> x509.Name:
    attrs = []
    if country:
        attrs.append(x509.NameAttribute(NameOID.COUNTRY_NAME, country))
    if org:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, org))
    attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, cn))
    if serial:
        attrs.append(x509.NameAttribute(NameOID.SERIAL_NUMBER, serial))
    return x509.Name(attrs)


def make_cert(
    subject: x509.Name,
    public_key,
    issuer: x509.Name,
    issuer_key,
    *,
    ca: bool = False,
    not_before: datetime.datetime = NOT_BEFORE,
    not_after: datetime.datetime = NOT_AFTER,
) -> x509.Certificate:
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
    )
    algorithm = None if isinstance(issuer_key, ed25519.Ed25519PrivateKey) else hashes.SHA256()
    return builder.sign(issuer_key, algorithm)


def to_der(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


def to_pem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


def build_cms(*certs: x509.Certificate) -> bytes:
    """DER ContentInfo/SignedData carrying ``certs`` in the given order.

    Encoded by hand: DER SET OF sorting would reorder the certificates,
    and real signers emit them in chain order.
    """
    sha256 = tlv(0x30, tlv(0x06, bytes.fromhex("608648016503040201")) + tlv(0x05, b""))
    signed_data = tlv(
        0x30,
        tlv(0x02, b"\x01")
        + tlv(0x31, sha256)
        + tlv(0x30, OID_DATA)
        + tlv(0xA0, b"".join(to_der(c) for c in certs))
        + tlv(0x31, b""),
    )
    return tlv(0x30, OID_SIGNED_DATA + tlv(0xA0, signed_data))


def tlv(tag: int, contents: bytes) -> bytes:
    """Minimal DER TLV encoder for hand-built malformed structures."""
    length = len(contents)
    if length < 0x80:
        return bytes([tag, length]) + contents
    size = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([tag, 0x80 | len(size)]) + size + contents


def build_signed_pdf(
    *blobs: bytes,
    padding: int = 0,
    header: bytes = PDF_HEADER,
    hex_override: list[bytes | None] | None = None,
) -> bytes:
    """
    Build a PDF with one signature dictionary per blob.

    Each /ByteRange is [0 lt gt_end rest] where ``lt`` is the offset of the
    ``<`` delimiter and ``gt_end`` the offset just past ``>``.

    Args:
        blobs: CMS blobs, hex-encoded into /Contents.
        padding: Zero bytes appended to each blob (reserved space).
        header: Document bytes preceding the signature dictionaries.
        hex_override: Per-blob raw hex text replacing the encoded blob.
    """
    out = bytearray(header)
    slots = []
    for index, blob in enumerate(blobs):
        hex_text = (blob + b"\x00" * padding).hex().upper().encode("ascii")
        if hex_override and hex_override[index] is not None:
            hex_text = hex_override[index]
        out += f"{index + 10} 0 obj\n<< /Type /Sig /Filter /Adobe.PPKLite".encode("ascii")
        out += b" /SubFilter /adbe.pkcs7.detached\n/ByteRange "
        br_pos = len(out)
        out += _BR_SLOT
        out += b"\n/Contents "
        lt = len(out)
        out += b"<" + hex_text + b">"
        gt_end = len(out)
        out += b"\n>>\nendobj\n"
        slots.append((br_pos, lt, gt_end))
    out += b"%%EOF\n"

    total = len(out)
    for br_pos, lt, gt_end in slots:
        array = f"[{0:010d} {lt:010d} {gt_end:010d} {total - gt_end:010d}]".encode("ascii")
        out[br_pos : br_pos + len(_BR_SLOT)] = array
    return bytes(out)


@dataclass(frozen=True)
class Pki:
    """A small certificate hierarchy used across tests."""

    root: x509.Certificate
    intermediate: x509.Certificate
    alice: x509.Certificate
    bob: x509.Certificate
    dave: x509.Certificate
    unrelated_root: x509.Certificate
    ec_root: x509.Certificate
    ec_leaf: x509.Certificate
    ed_self_signed: x509.Certificate


@pytest.fixture(scope="session")
def pki() -> Pki:
    root_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    root_name = make_name("Example Root CA", org="Example Trust", country="AR")
    root = make_cert(root_name, root_key.public_key(), root_name, root_key, ca=True)

    inter_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    inter_name = make_name("Example Issuing CA", org="Example Trust", country="AR")
    intermediate = make_cert(inter_name, inter_key.public_key(), root_name, root_key, ca=True)

    alice_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    alice = make_cert(
        make_name("Alice", org="Example Org", country="AR", serial="CUIT 20123456789"),
        alice_key.public_key(),
        root_name,
        root_key,
    )

    bob_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    bob = make_cert(make_name("Bob"), bob_key.public_key(), root_name, root_key)

    dave_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    dave = make_cert(
        make_name("Dave", org="Example Org"), dave_key.public_key(), inter_name, inter_key
    )

    other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    other_name = make_name("Unrelated Root CA", org="Elsewhere Inc", country="US")
    unrelated_root = make_cert(other_name, other_key.public_key(), other_name, other_key, ca=True)

    ec_key = ec.generate_private_key(ec.SECP256R1())
    ec_name = make_name("Example EC Root", country="AR")
    ec_root = make_cert(ec_name, ec_key.public_key(), ec_name, ec_key, ca=True)
    ec_leaf_key = ec.generate_private_key(ec.SECP256R1())
    ec_leaf = make_cert(make_name("Carol"), ec_leaf_key.public_key(), ec_name, ec_key)

    ed_key = ed25519.Ed25519PrivateKey.generate()
    ed_name = make_name("Example Ed25519", org="Example Trust")
    ed_self_signed = make_cert(ed_name, ed_key.public_key(), ed_name, ed_key, ca=True)

    return Pki(
        root=root,
        intermediate=intermediate,
        alice=alice,
        bob=bob,
        dave=dave,
        unrelated_root=unrelated_root,
        ec_root=ec_root,
        ec_leaf=ec_leaf,
        ed_self_signed=ed_self_signed,
    )


@pytest.fixture
def write_file(tmp_path: Path):
    """Write bytes under tmp_path and return the path."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def valid_pdf_bytes():
    """Create a minimal valid unsigned PDF using pikepdf."""
    import io

    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()
