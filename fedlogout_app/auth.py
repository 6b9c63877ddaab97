from typing import Any

from django.apps import apps
from django.contrib.auth import get_user_model
from social_core.backends.open_id_connect import OpenIdConnectAuth
from social_core.strategy import BaseStrategy

from fedlogout_app.constants import (
    SESSION_IDP_KEY,
    SESSION_SID_KEY,
    SESSION_SUB_KEY,
    SESSION_TENANT_KEY,
)

UserModel = get_user_model()


class FederatedOIDCBackend(OpenIdConnectAuth):
    """OpenID Connect login against a federated IdP that supports back-channel logout

    The tenant the IdP is registered under comes from the backend's TENANT
    setting (SOCIAL_AUTH_FEDERATED_OIDC_TENANT), defaulting to
    FEDLOGOUT_DEFAULT_TENANT.
    """

    name = "federated-oidc"

    DEFAULT_SCOPE = ["openid", "profile", "email"]


def login_tenant(backend) -> str:  # type: ignore[no-untyped-def]
    return (
        backend.setting("TENANT", None)
        or apps.get_app_config("fedlogout_app").logout_config.default_tenant
    )


def stash_oidc_session(
    strategy: BaseStrategy,
    details: dict[str, Any],
    user=UserModel,
    *args,
    response: dict[str, Any],
    backend=None,
    **kwargs,
) -> None:
    """Keep who logged in, and through which IdP, in the session so the login
    signal can link the identity and map the sid.

    Add it to SOCIAL_AUTH_PIPELINE; the Django login, and with it the
    user_logged_in signal, only happens once the pipeline has finished.
    """
    if backend is None:
        return

    id_token = getattr(backend, "id_token", None) or {}
    subject = id_token.get("sub") or kwargs.get("uid") or response.get("sub")
    if not subject:
        return

    strategy.session_set(SESSION_TENANT_KEY, login_tenant(backend))
    strategy.session_set(SESSION_IDP_KEY, backend.name)
    strategy.session_set(SESSION_SUB_KEY, str(subject))

    sid = id_token.get("sid") or response.get("sid")
    if sid:
        strategy.session_set(SESSION_SID_KEY, sid)
    else:
        # IdP does not do session-bound logout; sub based logout still works
        strategy.session_pop(SESSION_SID_KEY)
    return
