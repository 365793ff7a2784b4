"""
Structured logging for the PayPal module.

structlog renders through the stdlib root logger so the host application's
handlers and the OTEL trace id injection both apply. Events use the names
in BusinessEvents; the audit trail in the database is separate (core.audit).
"""

import logging
import os
import sys

import structlog
from opentelemetry.instrumentation.logging import LoggingInstrumentor

MODULE_NAME = "paypal"


def get_log_level() -> str:
    """Get log level from environment or default to INFO"""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_environment() -> str:
    return os.getenv("ENVIRONMENT", "development")


def get_log_renderer(environment: str):
    # JSON everywhere except a developer console
    if environment in ("test", "production"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


def add_module_name(logger, method_name, event_dict):
    """Tag every event so module logs can be filtered in a shared host log."""
    event_dict.setdefault("module", MODULE_NAME)
    return event_dict


def configure_logging(level: str | None = None, environment: str | None = None):
    """Set up structlog + OTEL context injection."""
    environment = environment or get_environment()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_module_name,
            structlog.processors.format_exc_info,
            get_log_renderer(environment),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Tests read stdout; everything else goes to stderr
    stream = sys.stdout if environment == "test" else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level or get_log_level())

    # Inject trace ids into stdlib records
    LoggingInstrumentor().instrument(set_logging_format=False)


# Business Event Log Names
class BusinessEvents:
    """Standard names for business event logs"""

    DISPATCH_ATTEMPT = "paypal.dispatch.attempt"
    DISPATCH_SUCCESS = "paypal.dispatch.success"
    DISPATCH_FAILURE = "paypal.dispatch.failure"
    ELIGIBILITY_CHECKED = "paypal.eligibility.checked"
    AUDIT_ENTRY = "paypal.audit"
    CONFIG_UPDATED = "paypal.config.updated"
    MODULE_ACTIVATED = "paypal.module.activated"
    MODULE_DEACTIVATED = "paypal.module.deactivated"
    PROVIDER_CALL = "paypal.provider.call"
    PROVIDER_ERROR = "paypal.provider.error"


# Configure logging when module is imported
configure_logging()
