"""Django ORM backed collaborators for the back-channel logout processor"""

# Standard library
import logging
from typing import Optional

# Django
from django.contrib.sessions.models import Session
from django.utils import timezone

# Local
from fedlogout_app.models import FederatedIdentity, FederatedSession, IdentityProvider
from fedlogout_app.providers import IdentityProviderRecord

logger = logging.getLogger(__name__)


def _first_record(queryset) -> Optional[IdentityProviderRecord]:  # type: ignore[no-untyped-def]
    provider = queryset.order_by("pk").first()
    return provider.to_record() if provider is not None else None


class DjangoIdentityProviderLookup:
    def by_issuer(self, issuer: str, tenant: str) -> Optional[IdentityProviderRecord]:
        return _first_record(
            IdentityProvider.objects.filter(tenant=tenant, issuer=issuer).exclude(
                issuer=""
            )
        )

    def by_name(self, name: str, tenant: str) -> Optional[IdentityProviderRecord]:
        return _first_record(IdentityProvider.objects.filter(tenant=tenant, name=name))

    def resident(self, tenant: str) -> Optional[IdentityProviderRecord]:
        return _first_record(
            IdentityProvider.objects.filter(tenant=tenant, is_resident=True)
        )


class DjangoSessionIdLookup:
    def session_key_for_sid(
        self, sid: str, provider: IdentityProviderRecord
    ) -> Optional[str]:
        return FederatedSession.objects.session_key_for_sid(
            sid, provider.tenant, provider.social_backend
        )


class FederatedUserIdLookup:
    """Resolves a federated subject through the identities linked at login.

    Provider names are only unique within a tenant, so the lookup is keyed on
    the tenant as well as the provider's backend name.
    """

    def user_id_for_subject(
        self, subject: str, tenant: str, provider: IdentityProviderRecord
    ) -> Optional[str]:
        user_id = FederatedIdentity.objects.user_id_for(
            tenant, provider.social_backend, subject
        )
        if user_id is None:
            logger.warning(
                f"No user linked to sub={subject} of {provider.social_backend} ({tenant})"
            )
            return None
        return str(user_id)


class DjangoSessionTerminator:
    def terminate_session(self, session_key: str) -> None:
        FederatedSession.objects.terminate_sessions([session_key])

    def terminate_user_sessions(self, user_id: str) -> None:
        session_keys = [
            session.session_key
            for session in Session.objects.filter(
                expire_date__gt=timezone.now()
            ).iterator()
            if str(session.get_decoded().get("_auth_user_id")) == str(user_id)
        ]
        FederatedSession.objects.terminate_sessions(session_keys)
