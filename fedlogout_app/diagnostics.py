import logging
from typing import Any, Optional, Protocol


class DiagnosticsSink(Protocol):
    """Receives structured diagnostic events. Purely observational."""

    def info(self, message: str, **fields: Any) -> None: ...

    def error(self, message: str, **fields: Any) -> None: ...


class LoggingDiagnosticsSink:
    """Writes diagnostic events to the ``fedlogout_app.diagnostics`` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("fedlogout_app.diagnostics")

    def info(self, message: str, **fields: Any) -> None:
        self._logger.info(message, extra={"diagnostics": fields})

    def error(self, message: str, **fields: Any) -> None:
        self._logger.error(message, extra={"diagnostics": fields})
