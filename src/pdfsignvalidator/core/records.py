"""Normalized certificate records."""

from __future__ import annotations

__all__ = ["CertificateRecord", "NameInfo", "Validity"]

import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from asn1crypto import x509 as asn1_x509


@dataclass(frozen=True)
class NameInfo:
    """Selected attributes of a distinguished name."""

    common_name: str | None = None
    owner: str | None = None
    serial_number: str | None = None
    country: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "common_name": self.common_name,
            "owner": self.owner,
            "serial_number": self.serial_number,
            "country": self.country,
        }


@dataclass(frozen=True)
class Validity:
    """Certificate validity window (UTC)."""

    from_: datetime.datetime | None = None
    to: datetime.datetime | None = None

    def to_dict(self) -> dict[str, datetime.datetime | None]:
        return {"from": self.from_, "to": self.to}


@dataclass(frozen=True)
class CertificateRecord:
    """
    Serializable view of an X.509 certificate.

    Every field except ``certificate`` is best-effort and may be None.
    ``certificate`` is the decoded certificate itself; it takes no part in
    equality, repr, or :meth:`to_dict`.
    """

    certificate: asn1_x509.Certificate = field(compare=False, repr=False)
    subject: NameInfo = field(default_factory=NameInfo)
    issuer: NameInfo = field(default_factory=NameInfo)
    validity: Validity = field(default_factory=Validity)
    public_key: bytes | None = None
    signature: str | None = None

    @property
    def der(self) -> bytes:
        """DER encoding of the certificate, identical to the source bytes."""
        return self.certificate.dump()

    def to_dict(self) -> dict[str, Any]:
        """Nested mapping in the serialized record shape."""
        return {
            "subject": self.subject.to_dict(),
            "issuer": self.issuer.to_dict(),
            "validity": self.validity.to_dict(),
            "public_key": self.public_key,
            "signature": self.signature,
        }
