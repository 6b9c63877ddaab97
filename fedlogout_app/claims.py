"""Unverified extraction of logout token claims"""

# Standard library
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

# Third-party
import jwt

# Local
from fedlogout_app.errors import ClientFault, ErrorMessage

logger = logging.getLogger(__name__)


class ClaimTypeError(ValueError):
    """A registered claim is present but has the wrong JSON type."""


@dataclass(frozen=True)
class ClaimSet:
    """Decoded logout token claims. Nothing here is trusted until the
    signature has been verified against the issuer's keys."""

    issuer: Optional[str] = None
    subject: Optional[str] = None
    audience: tuple[str, ...] = ()
    issued_at: Optional[datetime] = None
    sid: Optional[str] = None
    events: Any = None
    nonce: Any = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "ClaimSet":
        return cls(
            issuer=_optional_str(claims, "iss"),
            subject=_optional_str(claims, "sub"),
            audience=_audience(claims.get("aud")),
            issued_at=_timestamp(claims.get("iat")),
            sid=_optional_str(claims, "sid"),
            events=claims.get("events"),
            nonce=claims.get("nonce"),
        )


def _optional_str(claims: dict[str, Any], name: str) -> Optional[str]:
    value = claims.get(name)
    if value is None or isinstance(value, str):
        return value
    raise ClaimTypeError(f"{name} claim must be a string")


def _audience(value: Any) -> tuple[str, ...]:
    # aud is either a single string or an array of strings
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ClaimTypeError("aud claim must be a string or an array of strings")


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ClaimTypeError("iat claim must be a NumericDate")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ClaimTypeError("iat claim is out of range") from e


def parse_logout_token(token: Optional[str]) -> Union[ClaimSet, ClientFault]:
    """Parse a logout token into a ClaimSet without verifying its signature.

    Blank tokens and anything that is not a well-formed JWS with a JSON object
    payload are rejected as client faults.
    """
    if not token or not token.strip():
        return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_EMPTY_OR_NULL)

    try:
        claims = jwt.decode(token.strip(), options={"verify_signature": False})
        return ClaimSet.from_claims(claims)
    except (jwt.InvalidTokenError, ClaimTypeError) as e:
        logger.debug(f"Logout token could not be parsed: {e}")
        return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_PARSING_FAILURE, cause=e)
