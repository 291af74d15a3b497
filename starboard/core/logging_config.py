"""Logging setup for the evaluation API."""

import logging

import structlog


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Configure structlog and route it, with stdlib logging, through one root handler.

    Service loggers (`logging.getLogger`) and structlog loggers share the
    processors below, so both come out as JSON lines or console lines.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        fmt: "json" for machine-readable lines, "console" for local development
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if fmt == "console":
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )
    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
