"""Processing of OIDC federated IdP initiated (back-channel) logout requests"""

# Standard library
import logging
from typing import Optional, Sequence

# Local
from fedlogout_app.claims import ClaimSet, parse_logout_token
from fedlogout_app.conf import LogoutConfig
from fedlogout_app.diagnostics import DiagnosticsSink, LoggingDiagnosticsSink
from fedlogout_app.errors import ClientFault, ErrorMessage, LogoutFault, ServerFault
from fedlogout_app.outcome import LogoutOutcome, to_outcome
from fedlogout_app.providers import (
    IdentityProviderLookup,
    IdentityProviderRecord,
    resolve_issuer,
)
from fedlogout_app.sessions import (
    LogoutResult,
    SessionIdLookup,
    SessionResolver,
    SessionTerminator,
    UserIdLookup,
)
from fedlogout_app.signature import SignatureVerificationError, SignatureVerifier
from fedlogout_app.validators import (
    Clock,
    Validator,
    default_validators,
    run_validators,
    utcnow,
    validate_issuer,
)

logger = logging.getLogger(__name__)


class BackchannelLogoutProcessor:
    """Validates a logout token and terminates the sessions it refers to.

    Stages run strictly in order and the first fault ends the request:

    1. parse the token without trusting it
    2. require an iss claim
    3. resolve the issuing identity provider
    4. verify the signature with that provider's keys
    5. run the claim validators (aud, iat, events, nonce)
    6. terminate by sid, or by sub when no sid is present
    """

    def __init__(
        self,
        providers: IdentityProviderLookup,
        verifier: SignatureVerifier,
        session_lookup: SessionIdLookup,
        user_lookup: UserIdLookup,
        terminator: SessionTerminator,
        config: Optional[LogoutConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        clock: Clock = utcnow,
        validators: Optional[Sequence[Validator]] = None,
    ) -> None:
        self.config = config or LogoutConfig()
        self.providers = providers
        self.verifier = verifier
        self.diagnostics = diagnostics or LoggingDiagnosticsSink()
        self.validators = (
            list(validators)
            if validators is not None
            else default_validators(self.config, clock)
        )
        self.sessions = SessionResolver(
            session_lookup, user_lookup, terminator, self.diagnostics
        )

    def process(self, logout_token: Optional[str], tenant: Optional[str] = None) -> LogoutOutcome:
        tenant = tenant or self.config.default_tenant
        self.diagnostics.info(
            "Started processing OIDC federated IdP initiated logout request.",
            tenant=tenant,
        )
        result = self.handle(logout_token, tenant)
        if isinstance(result, LogoutFault):
            self._report(result)
        return to_outcome(result)

    def handle(self, logout_token: Optional[str], tenant: str) -> LogoutResult:
        claims = parse_logout_token(logout_token)
        if isinstance(claims, ClientFault):
            self.diagnostics.error(str(claims.error))
            return claims

        fault = validate_issuer(claims)
        if fault is not None:
            self.diagnostics.error(str(fault.error))
            return fault

        provider = resolve_issuer(claims.issuer, tenant, self.providers, self.diagnostics)
        if isinstance(provider, ServerFault):
            return provider

        fault = self.validate(logout_token.strip(), claims, provider)
        if fault is not None:
            return fault

        return self.sessions.logout(claims, tenant, provider)

    def validate(
        self, token: str, claims: ClaimSet, provider: IdentityProviderRecord
    ) -> Optional[LogoutFault]:
        try:
            verified = self.verifier.verify(token, provider)
        except SignatureVerificationError as e:
            self.diagnostics.error(
                str(ErrorMessage.LOGOUT_TOKEN_SIGNATURE_VALIDATION_FAILED),
                idp=provider.name,
                error=str(e),
            )
            return ServerFault.of(
                ErrorMessage.LOGOUT_TOKEN_SIGNATURE_VALIDATION_FAILED, cause=e
            )
        if not verified:
            self.diagnostics.error(
                str(ErrorMessage.LOGOUT_TOKEN_SIGNATURE_VALIDATION_FAILED),
                idp=provider.name,
            )
            return ServerFault.of(ErrorMessage.LOGOUT_TOKEN_SIGNATURE_VALIDATION_FAILED)

        return run_validators(self.validators, claims, provider, self.diagnostics)

    def _report(self, fault: LogoutFault) -> None:
        if isinstance(fault, ServerFault):
            logger.error(
                f"Back-channel logout failed: {fault.code} {fault.message}",
                exc_info=fault.cause,
            )
        else:
            logger.warning(f"Back-channel logout rejected: {fault.code} {fault.message}")
