"""Selecting and terminating the sessions a validated logout token refers to"""

# Standard library
import logging
from typing import Optional, Protocol, Union

# Local
from fedlogout_app.claims import ClaimSet
from fedlogout_app.diagnostics import DiagnosticsSink
from fedlogout_app.errors import ClientFault, ErrorMessage, ServerFault
from fedlogout_app.outcome import LogoutOutcome
from fedlogout_app.providers import IdentityProviderRecord

logger = logging.getLogger(__name__)

LogoutResult = Union[LogoutOutcome, ClientFault, ServerFault]


class SessionIdLookup(Protocol):
    def session_key_for_sid(
        self, sid: str, provider: IdentityProviderRecord
    ) -> Optional[str]: ...


class UserIdLookup(Protocol):
    def user_id_for_subject(
        self, subject: str, tenant: str, provider: IdentityProviderRecord
    ) -> Optional[str]: ...


class SessionTerminator(Protocol):
    def terminate_session(self, session_key: str) -> None: ...

    def terminate_user_sessions(self, user_id: str) -> None: ...


class SessionResolver:
    """Terminates a single session by sid, or every session of the user
    identified by sub when the token carries no sid."""

    def __init__(
        self,
        session_lookup: SessionIdLookup,
        user_lookup: UserIdLookup,
        terminator: SessionTerminator,
        diagnostics: DiagnosticsSink,
    ) -> None:
        self.session_lookup = session_lookup
        self.user_lookup = user_lookup
        self.terminator = terminator
        self.diagnostics = diagnostics

    def logout(
        self, claims: ClaimSet, tenant: str, provider: IdentityProviderRecord
    ) -> LogoutResult:
        if claims.sid and claims.sid.strip():
            return self.logout_by_sid(claims.sid, provider)

        if not claims.subject or not claims.subject.strip():
            self.diagnostics.error(str(ErrorMessage.LOGOUT_TOKEN_SUB_CLAIM_NOT_FOUND))
            return ClientFault.of(ErrorMessage.LOGOUT_TOKEN_SUB_CLAIM_NOT_FOUND)

        self.diagnostics.info(
            "No sid claim in the logout token. Terminating all sessions of the subject.",
            sub=claims.subject,
            tenant=tenant,
        )
        return self.logout_by_sub(claims.subject, tenant, provider)

    def logout_by_sid(self, sid: str, provider: IdentityProviderRecord) -> LogoutResult:
        self.diagnostics.info("Trying federated IdP initiated logout using sid.", sid=sid)
        try:
            session_key = self.session_lookup.session_key_for_sid(sid, provider)
        except Exception as e:
            self.diagnostics.error(
                str(ErrorMessage.RETRIEVING_SESSION_ID_MAPPING_FAILED),
                sid=sid,
                error=str(e),
            )
            return ServerFault.of(
                ErrorMessage.RETRIEVING_SESSION_ID_MAPPING_FAILED, sid, cause=e
            )

        if not session_key:
            # Probably already cleared by another logout path.
            self.diagnostics.info("No session found for the sid.", sid=sid)
            return LogoutOutcome.nothing_to_do()

        try:
            self.terminator.terminate_session(session_key)
        except Exception as e:
            self.diagnostics.error(
                str(ErrorMessage.USER_SESSION_TERMINATION_FAILURE), sid=sid, error=str(e)
            )
            return ServerFault.of(ErrorMessage.USER_SESSION_TERMINATION_FAILURE, sid, cause=e)

        logger.info(f"Back-channel logout terminated session for sid={sid}")
        self.diagnostics.info("Session terminated.", sid=sid, session_key=session_key)
        return LogoutOutcome.success()

    def logout_by_sub(
        self, sub: str, tenant: str, provider: IdentityProviderRecord
    ) -> LogoutResult:
        try:
            user_id = self.user_lookup.user_id_for_subject(sub, tenant, provider)
        except Exception as e:
            self.diagnostics.error(
                str(ErrorMessage.RETRIEVING_USER_ID_FAILED), sub=sub, error=str(e)
            )
            return ServerFault.of(ErrorMessage.RETRIEVING_USER_ID_FAILED, sub, cause=e)

        if not user_id:
            self.diagnostics.error(
                "Unable to perform logout operation. User id is empty.",
                sub=sub,
                tenant=tenant,
                idp=provider.name,
            )
            return ServerFault.of(ErrorMessage.RETRIEVING_USER_ID_FAILED, sub)

        try:
            self.terminator.terminate_user_sessions(user_id)
        except Exception as e:
            self.diagnostics.error(
                str(ErrorMessage.USER_SESSION_TERMINATION_FAILURE), sub=sub, error=str(e)
            )
            return ServerFault.of(ErrorMessage.USER_SESSION_TERMINATION_FAILURE, sub, cause=e)

        logger.info(f"Back-channel logout terminated sessions for sub={sub}")
        self.diagnostics.info("Sessions terminated.", sub=sub, user_id=user_id)
        return LogoutOutcome.success()
