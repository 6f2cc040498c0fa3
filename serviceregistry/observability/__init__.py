"""Observability for the service registry: structured logging."""

from serviceregistry.observability.logging import (
    AuthenticatedUserProcessor,
    PIIRedactor,
    bind_authenticated_user,
    configure_logging,
    get_logger,
    setup_logging,
)

__all__ = [
    "AuthenticatedUserProcessor",
    "PIIRedactor",
    "bind_authenticated_user",
    "configure_logging",
    "get_logger",
    "setup_logging",
]
