import logging
import sys

import structlog

from geoserver_runner.core.config import Settings, settings as default_settings


def configure_logging(settings: Settings | None = None):
    """
    Configure structlog based on settings from config.py which loads from .env files.

    Configuration:
        LOG_LEVEL: Sets the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default is INFO.
        LOG_JSON_FORMAT: When set to True, logs will be output in JSON format. Default is False (console format).

    Output goes to standard error so that it never mixes with anything a
    caller pipes from standard output.

    Returns:
        A configured structlog logger
    """
    settings = settings or default_settings
    log_level = settings.LOG_LEVEL.upper()
    use_json = settings.LOG_JSON_FORMAT

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False, exception_formatter=structlog.dev.plain_traceback),
        ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name=None, **context) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger with optional context.

    Args:
        name: Optional name for the logger
        **context: Additional context to bind to the logger

    Returns:
        A configured structlog logger with bound context
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger
