"""Claim checks mandated by OpenID Connect Back-Channel Logout 1.0.

Every validator is a callable taking the parsed claims and the resolved
identity provider and returning either ``None`` (passed) or a ClientFault.
They are run in order by :func:`run_validators`, which stops at the first
fault. Signature verification is not in this list: it needs the raw token and
its failures are server faults, so the processor runs it first.
"""

# Standard library
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

# Local
from fedlogout_app.claims import ClaimSet
from fedlogout_app.conf import LogoutConfig
from fedlogout_app.constants import BACKCHANNEL_LOGOUT_EVENT
from fedlogout_app.diagnostics import DiagnosticsSink
from fedlogout_app.errors import ClientFault, ErrorMessage
from fedlogout_app.providers import IdentityProviderRecord

logger = logging.getLogger(__name__)

Validator = Callable[[ClaimSet, IdentityProviderRecord], Optional[ClientFault]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_issuer(claims: ClaimSet) -> Optional[ClientFault]:
    """The iss claim is needed to find the provider, so this runs before
    issuer resolution and therefore takes no provider."""
    if _is_blank(claims.issuer):
        return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_ISS_CLAIM_VALIDATION_FAILED)
    return None


def validate_audience(
    claims: ClaimSet, provider: IdentityProviderRecord
) -> Optional[ClientFault]:
    # Providers without a client id are not audience checked.
    if _is_blank(provider.client_id):
        return None
    if provider.client_id not in claims.audience:
        return ClientFault.of(
            ErrorMessage.LOGOUT_TOKEN_AUD_CLAIM_VALIDATION_FAILED, provider.client_id
        )
    return None


def make_iat_validator(config: LogoutConfig, clock: Clock = utcnow) -> Validator:
    """Build the issued-at check for the given configuration.

    The iat claim is always required; its age is only enforced when
    ``config.enable_iat_validation`` is set.
    """

    def validate_iat(
        claims: ClaimSet, provider: IdentityProviderRecord
    ) -> Optional[ClientFault]:
        if claims.issued_at is None:
            return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_IAT_VALIDATION_FAILED)
        if not config.enable_iat_validation:
            return None

        age = (clock() - claims.issued_at).total_seconds()
        if age > config.iat_validity_period:
            logger.debug(
                f"Logout token used after the iat validity period of "
                f"{config.iat_validity_period}s (age {age:.0f}s)"
            )
            return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_IAT_VALIDATION_FAILED)
        return None

    return validate_iat


def validate_event(
    claims: ClaimSet, provider: IdentityProviderRecord
) -> Optional[ClientFault]:
    events = claims.events
    if (
        not isinstance(events, dict)
        or BACKCHANNEL_LOGOUT_EVENT not in events
        or events[BACKCHANNEL_LOGOUT_EVENT] != {}
    ):
        return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_EVENT_CLAIM_VALIDATION_FAILED)
    return None


def validate_nonce(
    claims: ClaimSet, provider: IdentityProviderRecord
) -> Optional[ClientFault]:
    if claims.nonce is None or not str(claims.nonce).strip():
        return None
    return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_NONCE_CLAIM_VALIDATION_FAILED)


def default_validators(config: LogoutConfig, clock: Clock = utcnow) -> list[Validator]:
    return [
        validate_audience,
        make_iat_validator(config, clock),
        validate_event,
        validate_nonce,
    ]


def run_validators(
    validators: Iterable[Validator],
    claims: ClaimSet,
    provider: IdentityProviderRecord,
    diagnostics: DiagnosticsSink,
) -> Optional[ClientFault]:
    for validator in validators:
        try:
            fault = validator(claims, provider)
        except (TypeError, ValueError, KeyError) as e:
            fault = ClientFault.of(ErrorMessage.LOGOUT_TOKEN_PARSING_FAILURE, cause=e)
        if fault is not None:
            diagnostics.error(
                str(fault.error),
                validator=getattr(validator, "__name__", repr(validator)),
                issuer=claims.issuer,
                detail=fault.message,
            )
            return fault
    return None
