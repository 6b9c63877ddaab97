from typing import Optional

from django.conf import settings
from django.contrib.sessions.models import Session
from django.db import models

import logging

from fedlogout_app.constants import DEFAULT_TENANT
from fedlogout_app.providers import IdentityProviderRecord

logger = logging.getLogger(__name__)


class IdentityProvider(models.Model):
    """An identity provider allowed to send back-channel logout tokens"""

    tenant = models.CharField(max_length=255, default=DEFAULT_TENANT, db_index=True)
    name = models.CharField(max_length=255)
    issuer = models.CharField(max_length=512, blank=True, db_index=True)
    client_id = models.CharField(max_length=255, blank=True)
    jwks_uri = models.URLField(max_length=512, blank=True)
    signing_key = models.TextField(blank=True, help_text="PEM encoded public key")
    entity_id = models.CharField(
        max_length=512,
        blank=True,
        help_text="Issuer identifier of the resident IdP",
    )
    algorithms = models.CharField(max_length=255, default="RS256")
    backend_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="social-auth backend name, defaults to the IdP name",
    )
    is_resident = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "name"], name="fedlogout_unique_idp_name"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.tenant})"

    def to_record(self) -> IdentityProviderRecord:
        return IdentityProviderRecord(
            id=self.pk,
            name=self.name,
            tenant=self.tenant,
            issuer=self.issuer,
            client_id=self.client_id,
            jwks_uri=self.jwks_uri,
            signing_key=self.signing_key,
            entity_id=self.entity_id,
            algorithms=tuple(
                alg.strip() for alg in self.algorithms.split(",") if alg.strip()
            ),
            backend_name=self.backend_name,
            is_resident=self.is_resident,
        )


class FederatedSessionManager(models.Manager):
    """Custom manager for FederatedSession with session termination logic"""

    def session_key_for_sid(self, sid: str, tenant: str, idp_name: str) -> Optional[str]:
        """Latest session key for a sid, as issued by one provider of one tenant."""
        mapping = (
            self.filter(sid=sid, tenant=tenant, idp_name=idp_name)
            .order_by("-created_at", "-pk")
            .first()
        )
        if mapping is None:
            logger.info(f"No session mapping for sid={sid} of {idp_name} ({tenant})")
            return None
        return mapping.session_key

    def terminate_sessions(self, session_keys: list[str]) -> int:
        """Delete the Django sessions and their mappings. Returns the session count."""
        existing_sessions = Session.objects.filter(session_key__in=session_keys)
        deleted_count = existing_sessions.delete()[0]
        self.filter(session_key__in=session_keys).delete()

        logger.info(
            f"Deleted {deleted_count} of {len(session_keys)} sessions: {session_keys}"
        )
        return deleted_count


class FederatedSession(models.Model):
    """Maps federated OIDC session IDs (sid) to Django session keys for back-channel logout"""

    sid = models.CharField(max_length=255, db_index=True, unique=False)
    session_key = models.CharField(max_length=40, db_index=True)
    tenant = models.CharField(max_length=255, default=DEFAULT_TENANT)
    idp_name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = FederatedSessionManager()

    class Meta:
        indexes = [
            models.Index(fields=["sid"], name="fedlogout_sid_idx"),
            models.Index(fields=["session_key"], name="fedlogout_session_key_idx"),
        ]


class FederatedIdentityManager(models.Manager):
    def link(self, tenant: str, idp_name: str, subject: str, user) -> "FederatedIdentity":  # type: ignore[no-untyped-def]
        identity, created = self.update_or_create(
            tenant=tenant,
            idp_name=idp_name,
            subject=subject,
            defaults={"user": user},
        )
        if created:
            logger.info(f"Linked sub={subject} of {idp_name} ({tenant}) to user {user.pk}")
        return identity

    def user_id_for(self, tenant: str, idp_name: str, subject: str) -> Optional[int]:
        return (
            self.filter(tenant=tenant, idp_name=idp_name, subject=subject)
            .values_list("user_id", flat=True)
            .first()
        )


class FederatedIdentity(models.Model):
    """The local user a federated subject logged in as, per tenant and provider"""

    tenant = models.CharField(max_length=255, default=DEFAULT_TENANT)
    idp_name = models.CharField(max_length=255)
    subject = models.CharField(max_length=255)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="federated_identities",
    )
    last_login = models.DateTimeField(auto_now=True)

    objects = FederatedIdentityManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "idp_name", "subject"],
                name="fedlogout_unique_identity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.subject} @ {self.idp_name} ({self.tenant})"
