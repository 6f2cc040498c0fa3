"""Structured logging for the service registry.

Events are rendered as JSON lines (or colored console output during
development) on stderr. Two processors are specific to the registry:

- AuthenticatedUserProcessor adds the administrator whose request is being
  handled, so every revision event can be traced back to a person.
- PIIRedactor keeps secrets and contact details out of the logs. Revision
  manipulation code counts as a secret: it may embed credentials.
"""

import re
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, cast

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from serviceregistry.config.models.observability import LoggingConfig

REDACTED = "[REDACTED]"

# Keys whose values are dropped outright, compared lowercased
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "authorization",
    "private_key",
    "privatekey",
    "manipulation_code",
})

# Metadata contact details, e.g. contacts:0:emailAddress
SENSITIVE_KEY_SUFFIXES: tuple[str, ...] = ("emailaddress", "telephonenumber")

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

LOG_LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

_authenticated_username: ContextVar[str | None] = ContextVar(
    "authenticated_username", default=None
)


def bind_authenticated_user(username: str | None) -> None:
    """Set the username attached to log events in the current context.

    Pass None once the request is done or the user logged out.
    """
    _authenticated_username.set(username)


class AuthenticatedUserProcessor:
    """Adds ``authenticated_username`` to events logged on behalf of a user.

    Events logged while nobody is authenticated pass through unchanged, and
    an explicit ``authenticated_username`` on the event is never overwritten.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        username = _authenticated_username.get()
        if username is not None:
            event_dict.setdefault("authenticated_username", username)
        return event_dict


class PIIRedactor:
    """Redacts secrets and contact details from log events.

    Values under a sensitive key are replaced wholesale. Email addresses
    found in any other string are masked. Nested dicts and lists are
    walked.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        redacted = {key: self._redact_item(key, value) for key, value in event_dict.items()}
        return cast(EventDict, redacted)

    def _redact_item(self, key: str, value: Any) -> Any:
        if _is_sensitive(key):
            return REDACTED
        return self._redact_value(value)

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        if isinstance(value, dict):
            return {key: self._redact_item(str(key), item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._redact_value(item) for item in value]
        return value


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_KEYS or lowered.endswith(SENSITIVE_KEY_SUFFIXES)


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structlog for the registry.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_pii: Whether to run the PIIRedactor
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        AuthenticatedUserProcessor(),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact_pii:
        processors.append(PIIRedactor())
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            LOG_LEVELS.get(level.upper(), LOG_LEVELS["INFO"])
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_logging(config: "LoggingConfig") -> None:
    """Apply the ``observability.logging`` section of the settings."""
    setup_logging(level=config.level, format=config.format, redact_pii=config.redact_pii)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for a module, typically ``get_logger(__name__)``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
