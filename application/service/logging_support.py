from typing import Any, Optional
from domain.interfaces import LoggingPort, BoundLogger


class NoOpLogger:
    """Stands in when no logging port is wired (unit tests, scripts)."""

    def debug(self, event: str, **kwargs: Any) -> None: pass
    def info(self, event: str, **kwargs: Any) -> None: pass
    def warning(self, event: str, **kwargs: Any) -> None: pass
    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None: pass


def bind_logger(logging_port: Optional[LoggingPort], **context: Any) -> BoundLogger:
    if logging_port:
        return logging_port.bind(**context)
    return NoOpLogger()
