"""Logfire observability for the Library Lending service.

Tracing is off unless ``LIBRARY_LENDING_LOGFIRE_ENABLED`` is set. Entry points
call ``initialize_observability()`` once at startup; everything else asks
``is_enabled()`` at call time, so modules imported before startup still pick
up the decision.
"""

import logging

import logfire

from ..config import ServerConfig, get_config

logger = logging.getLogger(__name__)


class _ObservabilityState:
    enabled: bool = False


def initialize_observability(config: ServerConfig | None = None) -> bool:
    """Configure Logfire from settings. Returns whether tracing is on."""
    config = config or get_config()

    if not config.logfire_enabled:
        logger.debug("Observability disabled via configuration")
        _ObservabilityState.enabled = False
        return False

    logfire.configure(
        token=config.logfire_token,
        service_name=config.server_name,
        service_version=config.server_version,
        environment=config.environment,
        send_to_logfire="if-token-present",
        console=False,
    )
    _ObservabilityState.enabled = True
    logger.info("Logfire observability enabled (environment: %s)", config.environment)
    return True


def is_enabled() -> bool:
    return _ObservabilityState.enabled


def reset_observability() -> None:
    """Forget the startup decision (useful for testing)."""
    _ObservabilityState.enabled = False


__all__ = [
    "initialize_observability",
    "is_enabled",
    "reset_observability",
]
