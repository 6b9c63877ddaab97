"""Typed back-channel logout configuration, read once from Django settings"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings as django_settings

from fedlogout_app.constants import (
    DEFAULT_IAT_VALIDITY_PERIOD,
    DEFAULT_JWKS_TIMEOUT,
    DEFAULT_TENANT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogoutConfig:
    enable_iat_validation: bool = False
    # seconds
    iat_validity_period: int = DEFAULT_IAT_VALIDITY_PERIOD
    default_tenant: str = DEFAULT_TENANT
    jwks_timeout: int = DEFAULT_JWKS_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Any = None) -> "LogoutConfig":
        """Build the config from FEDLOGOUT_* settings, falling back to the
        defaults for anything missing or malformed."""
        settings = settings if settings is not None else django_settings
        return cls(
            enable_iat_validation=_parse_bool(
                getattr(settings, "FEDLOGOUT_ENABLE_IAT_VALIDATION", False)
            ),
            iat_validity_period=_parse_seconds(
                "FEDLOGOUT_IAT_VALIDITY_PERIOD",
                getattr(settings, "FEDLOGOUT_IAT_VALIDITY_PERIOD", None),
                DEFAULT_IAT_VALIDITY_PERIOD,
            ),
            default_tenant=getattr(settings, "FEDLOGOUT_DEFAULT_TENANT", None)
            or DEFAULT_TENANT,
            jwks_timeout=_parse_seconds(
                "FEDLOGOUT_JWKS_TIMEOUT",
                getattr(settings, "FEDLOGOUT_JWKS_TIMEOUT", None),
                DEFAULT_JWKS_TIMEOUT,
            ),
        )


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _parse_seconds(name: str, value: Optional[Any], default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name} configured: {value!r}. Using default {default}")
        return default
    if seconds < 0:
        logger.warning(f"Negative {name} configured: {seconds}. Using default {default}")
        return default
    return seconds
