from typing import Any, Optional

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from fedlogout_app.providers import IdentityProviderRecord
from fedlogout_app.tests.fakes import RecordingDiagnostics, build_logout_claims, fake


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_pem(rsa_private_key) -> str:
    return (
        rsa_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


@pytest.fixture
def issuer() -> str:
    return f"https://{fake.domain_name()}/oauth2/token"


@pytest.fixture
def client_id() -> str:
    return fake.pystr(min_chars=16, max_chars=24)


@pytest.fixture
def provider(issuer, client_id, public_pem) -> IdentityProviderRecord:
    return IdentityProviderRecord(
        id=1,
        name="partner-idp",
        tenant="carbon.super",
        issuer=issuer,
        client_id=client_id,
        signing_key=public_pem,
    )


@pytest.fixture
def diagnostics():
    return RecordingDiagnostics()


@pytest.fixture
def sign_token(rsa_private_key):
    def _sign(claims: dict[str, Any], key: Optional[Any] = None, alg: str = "RS256") -> str:
        return jwt.encode(claims, key or rsa_private_key, algorithm=alg)

    return _sign


@pytest.fixture
def logout_token(sign_token, issuer, client_id):
    """Factory for signed logout tokens accepted by the ``provider`` fixture."""

    def _make(**overrides: Any) -> str:
        overrides.setdefault("audience", [client_id])
        return sign_token(build_logout_claims(issuer, **overrides))

    return _make


@pytest.fixture(scope="session")
def other_public_pem(other_private_key) -> str:
    return (
        other_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
