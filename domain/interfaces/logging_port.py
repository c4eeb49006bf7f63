from typing_extensions import Protocol
from typing import Any


class BoundLogger(Protocol):
    """Logger carrying context fields (installment_id, request_id, step...)."""

    def debug(self, event: str, **kwargs: Any) -> None: ...

    def info(self, event: str, **kwargs: Any) -> None: ...

    def warning(self, event: str, **kwargs: Any) -> None: ...

    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None:
        """
        Log an error event.

        Args:
            event: snake_case event name
            exc_info: Attach the exception currently being handled
            **kwargs: Additional context fields
        """
        ...


class LoggingPort(Protocol):
    """Protocol for structured logging."""

    def bind(self, **kwargs: Any) -> BoundLogger:
        """Return a logger with the given fields attached to every event."""
        ...
