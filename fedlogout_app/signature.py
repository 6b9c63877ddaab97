"""Logout token signature verification"""

# Standard library
import logging
import threading
from typing import Any, Protocol

# Third-party
import jwt
from jwt import PyJWKClient

# Local
from fedlogout_app.constants import DEFAULT_JWKS_TIMEOUT
from fedlogout_app.providers import IdentityProviderRecord

logger = logging.getLogger(__name__)


class SignatureVerificationError(Exception):
    """Key material for a provider could not be obtained or used."""


class SignatureVerifier(Protocol):
    def verify(self, token: str, provider: IdentityProviderRecord) -> bool: ...


# Only the signature is checked here; claims are validated separately.
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_aud": False,
    "verify_iss": False,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_sub": False,
    "verify_jti": False,
}


class JWKSignatureVerifier:
    """Verifies tokens against a provider's PEM key or its JWKS endpoint."""

    def __init__(self, timeout: int = DEFAULT_JWKS_TIMEOUT) -> None:
        self._timeout = timeout
        self._clients: dict[str, PyJWKClient] = {}
        self._lock = threading.Lock()

    def _jwk_client(self, uri: str) -> PyJWKClient:
        with self._lock:
            client = self._clients.get(uri)
            if client is None:
                client = PyJWKClient(uri, timeout=self._timeout)
                self._clients[uri] = client
            return client

    def _signing_key(self, token: str, provider: IdentityProviderRecord) -> Any:
        if provider.signing_key:
            return provider.signing_key
        if provider.jwks_uri:
            try:
                return self._jwk_client(provider.jwks_uri).get_signing_key_from_jwt(
                    token
                ).key
            except jwt.PyJWTError as e:
                raise SignatureVerificationError(
                    f"Unable to get signing key from {provider.jwks_uri}: {e}"
                ) from e
        raise SignatureVerificationError(
            f"No signing key or JWKS URI configured for IdP {provider.name}"
        )

    def verify(self, token: str, provider: IdentityProviderRecord) -> bool:
        key = self._signing_key(token, provider)
        try:
            jwt.decode(
                token,
                key,
                algorithms=list(provider.algorithms),
                options=_SIGNATURE_ONLY,
            )
        except (jwt.InvalidKeyError, jwt.PyJWKError, TypeError, ValueError) as e:
            raise SignatureVerificationError(
                f"Signing key of IdP {provider.name} is unusable: {e}"
            ) from e
        except jwt.InvalidTokenError as e:
            logger.debug(f"Logout token signature rejected for IdP {provider.name}: {e}")
            return False
        return True
