import logging

from django.apps import apps
from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from .constants import (
    SESSION_IDP_KEY,
    SESSION_SID_KEY,
    SESSION_SUB_KEY,
    SESSION_TENANT_KEY,
)
from .models import FederatedIdentity, FederatedSession

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def record_federated_login(sender, request, user, **kwargs):  # type: ignore[no-untyped-def]
    """
    After a federated login, link (tenant, IdP, sub) to the user and map the
    OIDC sid to the Django session_key it was issued for.
    """
    session = getattr(request, "session", None)
    if session is None:
        return
    idp_name = session.get(SESSION_IDP_KEY)
    subject = session.get(SESSION_SUB_KEY)
    if not idp_name or not subject:
        return
    tenant = (
        session.get(SESSION_TENANT_KEY)
        or apps.get_app_config("fedlogout_app").logout_config.default_tenant
    )

    try:
        FederatedIdentity.objects.link(tenant, idp_name, subject, user)

        sid = session.get(SESSION_SID_KEY)
        if not sid:
            return

        # login() rotates the key, so only now does it match the cookie
        session_key = session.session_key
        if not session_key:
            logger.warning("OIDC mapping skipped: no session_key available post-login")
            return

        FederatedSession.objects.create(
            sid=sid, session_key=session_key, tenant=tenant, idp_name=idp_name
        )
        logger.info(
            "Mapped sid=%s of %s (%s) -> session=%s", sid, idp_name, tenant, session_key
        )
    except Exception:
        logger.exception("Error recording federated login on user_logged_in")
