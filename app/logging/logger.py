import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone

_current_request_id: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestIdFilter(logging.Filter):
    """Stamp records with the request id bound to the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _current_request_id.get()
        return True


class Log:
    """Centralized logging with structured format."""

    _logger: logging.Logger = logging.getLogger("docintel")
    _debug_mode: bool = False
    _environment: str = "dev"

    @classmethod
    def configure(
        cls,
        log_level: str,
        debug_mode: bool = False,
        environment: str = "dev",
    ) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        cls._debug_mode = debug_mode
        cls._environment = environment
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.addFilter(_RequestIdFilter())
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] [%(request_id)s] %(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    def debug_enabled(cls) -> bool:
        return cls._debug_mode

    @classmethod
    def bind_request_id(cls, request_id: str) -> Token[str]:
        """Tag every record logged in the current context with ``request_id``.

        Pass the returned token to ``reset_request_id`` when the request ends.
        """
        return _current_request_id.set(request_id)

    @classmethod
    def reset_request_id(cls, token: Token[str]) -> None:
        _current_request_id.reset(token)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def operation_error(
        cls,
        request_id: str,
        operation: str,
        exc: BaseException,
        **context: object,
    ) -> dict[str, object]:
        """Log a JSON error entry for a failed operation and return it.

        The free-form context is only included in debug mode, since it may
        carry file names or provider payloads.
        """
        entry: dict[str, object] = {
            "requestId": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "operation": operation,
            "environment": cls._environment,
            "error": {
                "message": getattr(exc, "message", None) or str(exc),
                "code": str(getattr(exc, "code", None) or "UNKNOWN"),
            },
            "context": context if cls._debug_mode else {},
        }
        cls._logger.error(json.dumps(entry, default=str), extra={"request_id": request_id})
        return entry


Log._logger.addFilter(_RequestIdFilter())
