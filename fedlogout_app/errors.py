"""Fault values returned by the back-channel logout stages"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorMessage(Enum):
    """Stable error codes and message templates for logout faults"""

    LOGOUT_TOKEN_EMPTY_OR_NULL = (
        "BCL-60001",
        "logout_token request parameter is empty or missing.",
    )
    LOGOUT_TOKEN_PARSING_FAILURE = (
        "BCL-60002",
        "Error while parsing the logout token.",
    )
    LOGOUT_TOKEN_ISS_CLAIM_VALIDATION_FAILED = (
        "BCL-60003",
        "No iss claim found in the logout token.",
    )
    LOGOUT_TOKEN_SIGNATURE_VALIDATION_FAILED = (
        "BCL-60004",
        "Signature validation of the logout token failed.",
    )
    LOGOUT_TOKEN_AUD_CLAIM_VALIDATION_FAILED = (
        "BCL-60005",
        "The aud claim of the logout token does not contain the client id: %s.",
    )
    LOGOUT_TOKEN_IAT_VALIDATION_FAILED = (
        "BCL-60006",
        "The iat claim of the logout token is missing or outside the validity period.",
    )
    LOGOUT_TOKEN_EVENT_CLAIM_VALIDATION_FAILED = (
        "BCL-60007",
        "The events claim of the logout token is not a back-channel logout event.",
    )
    LOGOUT_TOKEN_NONCE_CLAIM_VALIDATION_FAILED = (
        "BCL-60008",
        "A logout token must not contain a nonce claim.",
    )
    LOGOUT_TOKEN_SUB_CLAIM_NOT_FOUND = (
        "BCL-60009",
        "The logout token contains neither a sid nor a sub claim.",
    )
    NO_REGISTERED_IDP_FOR_ISSUER = (
        "BCL-65001",
        "No registered identity provider found for the issuer: %s.",
    )
    RETRIEVING_IDENTITY_PROVIDER_FAILED = (
        "BCL-65002",
        "Error while retrieving the identity provider for the issuer: %s.",
    )
    GETTING_RESIDENT_IDP_FAILED = (
        "BCL-65003",
        "Error while retrieving the resident identity provider of tenant: %s.",
    )
    RETRIEVING_SESSION_ID_MAPPING_FAILED = (
        "BCL-65004",
        "Error while retrieving the session mapped to the sid: %s.",
    )
    RETRIEVING_USER_ID_FAILED = (
        "BCL-65005",
        "Unable to resolve a local user for the sub: %s.",
    )
    USER_SESSION_TERMINATION_FAILURE = (
        "BCL-65006",
        "Error while terminating the sessions for: %s.",
    )
    LOGOUT_SERVER_EXCEPTION = (
        "BCL-65007",
        "Error occurred while processing the logout request.",
    )

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    def format(self, data: Optional[str] = None) -> str:
        if data is None or "%s" not in self.template:
            return self.template
        return self.template % data

    def __str__(self) -> str:
        return f"{self.code} - {self.template}"


@dataclass(frozen=True)
class LogoutFault:
    error: ErrorMessage
    message: str
    cause: Optional[BaseException] = None

    @classmethod
    def of(
        cls,
        error: ErrorMessage,
        data: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> "LogoutFault":
        return cls(error=error, message=error.format(data), cause=cause)

    @property
    def code(self) -> str:
        return self.error.code


@dataclass(frozen=True)
class ClientFault(LogoutFault):
    """The token or request is at fault; safe to echo back to the caller."""


@dataclass(frozen=True)
class ServerFault(LogoutFault):
    """Our own configuration or storage is at fault; never echoed verbatim."""
