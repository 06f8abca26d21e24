"""Structured logging configuration using structlog.

Every event carries the application name, version and environment. Run
scoped fields (``run_id``, ``attempt``) are bound once per run through
structlog contextvars by the orchestrator and merged into each event, so
individual log calls do not repeat them.

Production renders one JSON object per line; development renders a
readable console line.
"""

import logging
import sys
from typing import TYPE_CHECKING, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from capture_flow.config import Settings

# Loggers of collaborator libraries that are noisy below WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "redis")


def app_context(app_name: str, app_version: Optional[str], environment: str) -> Processor:
    """Build a processor that stamps application identity onto every event."""

    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", app_name)
        if app_version:
            event_dict.setdefault("version", app_version)
        event_dict.setdefault("env", environment)
        return event_dict

    return add_app_context


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    app_name: str = "capture-flow",
    app_version: Optional[str] = None,
) -> None:
    """Configure structlog and route it through stdlib logging.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        environment: "production" selects JSON output, anything else the console
        app_name: Value of the ``app`` field on every event
        app_version: Value of the ``version`` field (omitted when None)
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    is_production = environment.lower() == "production"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        app_context(app_name, app_version, environment),
    ]

    renderer: Processor
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging_from_settings(settings: "Settings") -> None:
    """Configure logging from application settings; DEBUG forces the DEBUG level."""
    configure_logging(
        log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        app_name=settings.APP_NAME,
        app_version=settings.APP_VERSION,
    )
    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(logging.getLogger().level),
        renderer="json" if settings.ENVIRONMENT.lower() == "production" else "console",
    )
