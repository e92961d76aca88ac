"""
Configuration for pdfsignvalidator.

Settings come from environment variables, resolved at call time so that
tests and long-running callers can change them without re-importing.
Invalid values are logged and replaced by the built-in defaults.
"""

from __future__ import annotations

__all__ = [
    "Settings",
    "get_settings",
    "resolve_signer_policy",
]

import logging
import os
from dataclasses import dataclass

from .constants import (
    DEFAULT_MAX_CMS_SIZE,
    DEFAULT_SIGNER_POLICY,
    ENV_MAX_CMS_SIZE,
    ENV_SIGNER_POLICY,
    MAX_CMS_SIZE_LIMIT,
    SIGNER_POLICIES,
)
from .errors import ConfigError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    signer_policy: str = DEFAULT_SIGNER_POLICY
    max_cms_size: int = DEFAULT_MAX_CMS_SIZE


def _env_signer_policy() -> str:
    value = os.environ.get(ENV_SIGNER_POLICY, "").strip().lower()
    if not value:
        return DEFAULT_SIGNER_POLICY
    if value not in SIGNER_POLICIES:
        _logger.warning(
            "%s=%r is not one of %s, using %r",
            ENV_SIGNER_POLICY,
            value,
            ", ".join(SIGNER_POLICIES),
            DEFAULT_SIGNER_POLICY,
        )
        return DEFAULT_SIGNER_POLICY
    return value


def _env_max_cms_size() -> int:
    value = os.environ.get(ENV_MAX_CMS_SIZE, "").strip()
    if not value:
        return DEFAULT_MAX_CMS_SIZE
    try:
        size = int(value)
    except ValueError:
        _logger.warning("Invalid %s=%r, using default", ENV_MAX_CMS_SIZE, value)
        return DEFAULT_MAX_CMS_SIZE
    if size <= 0 or size > MAX_CMS_SIZE_LIMIT:
        _logger.warning(
            "%s=%d out of range [1, %d], using default",
            ENV_MAX_CMS_SIZE,
            size,
            MAX_CMS_SIZE_LIMIT,
        )
        return DEFAULT_MAX_CMS_SIZE
    return size


def get_settings() -> Settings:
    """Resolve settings from the environment.

    Returns:
        Settings with every invalid or missing value replaced by its default.
    """
    return Settings(signer_policy=_env_signer_policy(), max_cms_size=_env_max_cms_size())


def resolve_signer_policy(policy: str | None) -> str:
    """Pick the signer policy: explicit argument first, then the environment.

    Raises:
        ConfigError: If an explicit policy name is unknown.
    """
    if policy is None:
        return get_settings().signer_policy
    normalized = policy.strip().lower()
    if normalized not in SIGNER_POLICIES:
        raise ConfigError(
            f"Unknown signer policy {policy!r}. Use one of: {', '.join(SIGNER_POLICIES)}"
        )
    return normalized
