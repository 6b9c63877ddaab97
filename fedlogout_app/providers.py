"""Identity provider records and issuer resolution"""

# Standard library
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

# Local
from fedlogout_app.constants import DEFAULT_IDP_NAME
from fedlogout_app.diagnostics import DiagnosticsSink
from fedlogout_app.errors import ErrorMessage, ServerFault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityProviderRecord:
    """A trust anchor for logout tokens, scoped to a tenant."""

    id: int
    name: str
    tenant: str
    issuer: str = ""
    client_id: str = ""
    jwks_uri: str = ""
    signing_key: str = ""
    entity_id: str = ""
    algorithms: tuple[str, ...] = ("RS256",)
    backend_name: str = ""
    is_resident: bool = False

    @property
    def social_backend(self) -> str:
        return self.backend_name or self.name


class IdentityProviderLookup(Protocol):
    def by_issuer(self, issuer: str, tenant: str) -> Optional[IdentityProviderRecord]: ...

    def by_name(self, name: str, tenant: str) -> Optional[IdentityProviderRecord]: ...

    def resident(self, tenant: str) -> Optional[IdentityProviderRecord]: ...


def resolve_issuer(
    issuer: str,
    tenant: str,
    lookup: IdentityProviderLookup,
    diagnostics: DiagnosticsSink,
) -> Union[IdentityProviderRecord, ServerFault]:
    """Find the identity provider that issued a logout token.

    Providers are matched on their issuer property first and on their name
    second. A match on the catch-all ``default`` provider means the token
    claims to come from the tenant's resident IdP, which is only accepted when
    the resident IdP's entity id equals the issuer.
    """
    try:
        provider = lookup.by_issuer(issuer, tenant)
        if provider is None:
            diagnostics.info(
                "No IdP registered with a matching issuer property. "
                "Attempting to find the IdP by name.",
                issuer=issuer,
                tenant=tenant,
            )
            provider = lookup.by_name(issuer, tenant)
    except Exception as e:
        diagnostics.error(
            str(ErrorMessage.RETRIEVING_IDENTITY_PROVIDER_FAILED),
            issuer=issuer,
            tenant=tenant,
            error=str(e),
        )
        return ServerFault.of(
            ErrorMessage.RETRIEVING_IDENTITY_PROVIDER_FAILED, issuer, cause=e
        )

    if provider is not None and provider.name.lower() == DEFAULT_IDP_NAME:
        return _resident_for_issuer(issuer, tenant, lookup, diagnostics)

    if provider is None:
        diagnostics.error(
            str(ErrorMessage.NO_REGISTERED_IDP_FOR_ISSUER), issuer=issuer, tenant=tenant
        )
        return ServerFault.of(ErrorMessage.NO_REGISTERED_IDP_FOR_ISSUER, issuer)

    logger.debug(f"Resolved issuer {issuer} to IdP {provider.name} in tenant {tenant}")
    return provider


def _resident_for_issuer(
    issuer: str,
    tenant: str,
    lookup: IdentityProviderLookup,
    diagnostics: DiagnosticsSink,
) -> Union[IdentityProviderRecord, ServerFault]:
    try:
        resident = lookup.resident(tenant)
    except Exception as e:
        diagnostics.error(
            str(ErrorMessage.GETTING_RESIDENT_IDP_FAILED), tenant=tenant, error=str(e)
        )
        return ServerFault.of(ErrorMessage.GETTING_RESIDENT_IDP_FAILED, tenant, cause=e)

    if resident is None or not resident.entity_id or resident.entity_id != issuer:
        diagnostics.error(
            str(ErrorMessage.NO_REGISTERED_IDP_FOR_ISSUER), issuer=issuer, tenant=tenant
        )
        return ServerFault.of(ErrorMessage.NO_REGISTERED_IDP_FOR_ISSUER, issuer)
    return resident
