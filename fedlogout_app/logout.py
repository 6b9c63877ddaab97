"""OIDC back-channel logout view"""

# Standard library
import logging
from typing import Optional

# Django
from django.apps import apps
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

# Local
from fedlogout_app.constants import LOGOUT_TOKEN_PARAM
from fedlogout_app.errors import ErrorMessage
from fedlogout_app.pipeline import BackchannelLogoutProcessor
from fedlogout_app.stores import (
    DjangoIdentityProviderLookup,
    DjangoSessionIdLookup,
    DjangoSessionTerminator,
    FederatedUserIdLookup,
)

logger = logging.getLogger(__name__)


def get_processor() -> BackchannelLogoutProcessor:
    """Build a processor wired to the Django backed collaborators."""
    app_config = apps.get_app_config("fedlogout_app")

    return BackchannelLogoutProcessor(
        providers=DjangoIdentityProviderLookup(),
        verifier=app_config.verifier,
        session_lookup=DjangoSessionIdLookup(),
        user_lookup=FederatedUserIdLookup(),
        terminator=DjangoSessionTerminator(),
        config=app_config.logout_config,
    )


@csrf_exempt
@require_POST
def backchannel_logout(request: HttpRequest, tenant: Optional[str] = None) -> HttpResponse:
    """
    Handle back-channel logout requests from federated identity providers.

    The IdP posts a logout_token JWT when a user's session is terminated.
    We validate the token and terminate matching Django sessions.
    """
    logout_token = request.POST.get(LOGOUT_TOKEN_PARAM)

    try:
        outcome = get_processor().process(logout_token, tenant)
    except Exception as e:
        logger.error(f"Back-channel logout: error: {e}", exc_info=True)
        return HttpResponse(
            ErrorMessage.LOGOUT_SERVER_EXCEPTION.template,
            status=500,
            content_type="text/plain",
        )

    return HttpResponse(outcome.body, status=outcome.status, content_type="text/plain")
