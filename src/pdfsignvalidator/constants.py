"""
Application-wide constants for pdfsignvalidator.

Size limits, environment variable names, and defaults are centralized
here for easy maintenance and configuration.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("pdf-sign-validator")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "ASN1_SEQUENCE_TAG",
    "BYTES_PER_MB",
    "DEFAULT_MAX_CMS_SIZE",
    "DEFAULT_SIGNER_POLICY",
    "ENV_MAX_CMS_SIZE",
    "ENV_SIGNER_POLICY",
    "MAX_CMS_SIZE_LIMIT",
    "PEM_CERTIFICATE_TYPE",
    "SIGNER_POLICIES",
    "__version__",
]

# ── Size units ────────────────────────────────────────────────────────

BYTES_PER_MB = 1024 * 1024


# ── Size limits (bytes) ───────────────────────────────────────────────

# Largest CMS blob accepted from a single /Contents entry (16 MB DER).
# Protects against ByteRange values claiming absurd sizes.
DEFAULT_MAX_CMS_SIZE = 16 * BYTES_PER_MB

# Hard ceiling for the env override
MAX_CMS_SIZE_LIMIT = 256 * BYTES_PER_MB


# ── ASN.1 / PEM ───────────────────────────────────────────────────────

# ASN.1 SEQUENCE tag -- first byte of any valid CMS/PKCS#7 blob or certificate
ASN1_SEQUENCE_TAG = 0x30

# PEM block type accepted for certificates
PEM_CERTIFICATE_TYPE = "CERTIFICATE"


# ── Signer certificate selection ──────────────────────────────────────

# Which certificate of the CMS certificate set is treated as the signer's.
#   last  -- last certificate in the set (common signing-tool convention)
#   first -- first certificate in the set
#   leaf  -- the certificate that issued no other certificate in the set
SIGNER_POLICIES = ("last", "first", "leaf")

DEFAULT_SIGNER_POLICY = "last"


# ── Environment variable names ──────────────────────────────────────

ENV_SIGNER_POLICY = "PDFSIGNVALIDATOR_SIGNER_POLICY"
ENV_MAX_CMS_SIZE = "PDFSIGNVALIDATOR_MAX_CMS_SIZE"
