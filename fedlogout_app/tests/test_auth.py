import pytest
from faker import Faker
from social_core.tests.models import TestStorage
from social_core.tests.strategy import TestStrategy

from fedlogout_app.auth import FederatedOIDCBackend, stash_oidc_session
from fedlogout_app.constants import (
    SESSION_IDP_KEY,
    SESSION_SID_KEY,
    SESSION_SUB_KEY,
    SESSION_TENANT_KEY,
)

fake = Faker()


@pytest.fixture
def mock_strategy():
    """Mock social auth strategy"""
    return TestStrategy(storage=TestStorage())


def generate_id_token(include_sid=True, include_nonce=True):
    """Generate fake decoded ID token claims"""
    claims = {
        "iss": f"https://{fake.domain_name()}/oauth2/token",
        "sub": fake.uuid4(),
        "aud": fake.pystr(),
        "iat": fake.unix_time(),
        "exp": fake.unix_time(),
        "email": fake.email(),
    }
    if include_sid:
        claims["sid"] = fake.uuid4()
    if include_nonce:
        claims["nonce"] = fake.uuid4()
    return claims


def make_backend(strategy, id_token):
    backend = FederatedOIDCBackend(strategy)
    backend.id_token = id_token
    return backend


sid_param = pytest.mark.parametrize(
    "include_sid", [True, False], ids=["with_sid", "without_sid"]
)


class TestFederatedOIDCBackend:
    def test_backend_name(self):
        assert FederatedOIDCBackend.name == "federated-oidc"

    def test_requests_openid_scope(self):
        assert "openid" in FederatedOIDCBackend.DEFAULT_SCOPE


class TestStashOidcSession:
    def test_stores_login_identity(self, mock_strategy):
        id_token = generate_id_token()

        stash_oidc_session(
            mock_strategy,
            {},
            None,
            response={},
            backend=make_backend(mock_strategy, id_token),
        )

        assert mock_strategy.session_get(SESSION_SID_KEY) == id_token["sid"]
        assert mock_strategy.session_get(SESSION_SUB_KEY) == id_token["sub"]
        assert mock_strategy.session_get(SESSION_IDP_KEY) == "federated-oidc"
        assert mock_strategy.session_get(SESSION_TENANT_KEY) == "carbon.super"

    def test_tenant_comes_from_backend_setting(self, mock_strategy):
        mock_strategy.set_settings({"SOCIAL_AUTH_FEDERATED_OIDC_TENANT": "acme"})

        stash_oidc_session(
            mock_strategy,
            {},
            None,
            response={},
            backend=make_backend(mock_strategy, generate_id_token()),
        )

        assert mock_strategy.session_get(SESSION_TENANT_KEY) == "acme"

    @sid_param
    def test_only_sid_tokens_are_mapped(self, mock_strategy, include_sid):
        mock_strategy.session_set(SESSION_SID_KEY, "left-over-sid")
        id_token = generate_id_token(include_sid=include_sid)

        stash_oidc_session(
            mock_strategy,
            {},
            None,
            response={},
            backend=make_backend(mock_strategy, id_token),
        )

        assert mock_strategy.session_get(SESSION_SID_KEY) == id_token.get("sid")
        assert mock_strategy.session_get(SESSION_SUB_KEY) == id_token["sub"]

    def test_falls_back_to_response_claims(self, mock_strategy):
        sid = fake.uuid4()

        stash_oidc_session(
            mock_strategy,
            {},
            None,
            response={"sid": sid},
            backend=make_backend(mock_strategy, None),
            uid="alice",
        )

        assert mock_strategy.session_get(SESSION_SID_KEY) == sid
        assert mock_strategy.session_get(SESSION_SUB_KEY) == "alice"

    def test_without_backend(self, mock_strategy):
        stash_oidc_session(mock_strategy, {}, None, response={"sid": fake.uuid4()})

        assert mock_strategy.session_get(SESSION_SID_KEY) is None
        assert mock_strategy.session_get(SESSION_IDP_KEY) is None

    def test_leaves_details_untouched(self, mock_strategy):
        details = {"existing_field": "preserved"}

        stash_oidc_session(
            mock_strategy,
            details,
            None,
            response={},
            backend=make_backend(mock_strategy, generate_id_token()),
        )

        assert details == {"existing_field": "preserved"}
