from dataclasses import dataclass
from typing import Union

from fedlogout_app.constants import LOGOUT_SUCCESS
from fedlogout_app.errors import ClientFault, ErrorMessage, ServerFault


@dataclass(frozen=True)
class LogoutOutcome:
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return self.status == 200

    @classmethod
    def success(cls) -> "LogoutOutcome":
        return cls(200, LOGOUT_SUCCESS)

    @classmethod
    def nothing_to_do(cls) -> "LogoutOutcome":
        """The referenced session is already gone."""
        return cls(200, "")


def to_outcome(result: Union[LogoutOutcome, ClientFault, ServerFault]) -> LogoutOutcome:
    """Map a stage result to the response sent back to the identity provider.

    Client faults echo their message; server faults only ever expose the
    generic message.
    """
    if isinstance(result, LogoutOutcome):
        return result
    if isinstance(result, ClientFault):
        return LogoutOutcome(400, result.message)
    if isinstance(result, ServerFault):
        return LogoutOutcome(500, ErrorMessage.LOGOUT_SERVER_EXCEPTION.template)
    raise TypeError(f"Unexpected logout result: {result!r}")
