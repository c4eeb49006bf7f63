"""
Logging adapter that implements LoggingPort protocol.

Wraps structlog so the application layer only sees bind/info/warning/error.
"""
from typing import Any
from domain.interfaces import BoundLogger
from infrastructure.logging.structlog_logs import logger as structlog_logger


class StructlogBoundLogger:
    """Wrapper for a structlog bound logger that implements BoundLogger."""

    def __init__(self, bound_logger):
        self._logger = bound_logger

    def debug(self, event: str, **kwargs: Any) -> None:
        self._logger.debug(event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._logger.info(event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._logger.warning(event, **kwargs)

    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(event, exc_info=exc_info, **kwargs)


class LoggingAdapter:
    """
    Adapter that implements LoggingPort for structured JSON logging.

    Context bound here is added to every event the use case emits, next to
    whatever the request middleware put in structlog's contextvars.
    """

    def __init__(self, **base_context: Any):
        self._base_context = base_context

    def bind(self, **kwargs: Any) -> BoundLogger:
        bound_logger = structlog_logger.bind(**self._base_context, **kwargs)
        return StructlogBoundLogger(bound_logger)
