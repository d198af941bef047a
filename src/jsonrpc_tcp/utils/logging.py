"""
structlog configuration for applications embedding the client.

The library itself only calls structlog.get_logger(); call
configure_logging() once at application start-up to route and render
those events.
"""
import logging as py_logging

import structlog

from ..config import LoggingConfig


def configure_logging(logging_config: LoggingConfig | None = None) -> None:
    """Configures stdlib logging and structlog from a LoggingConfig."""
    logging_config = logging_config or LoggingConfig()

    py_logging.basicConfig(
        level=getattr(py_logging, logging_config.level.upper()),
        format="%(message)s",
        force=True
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=True) if logging_config.format.lower() == "console"
            else structlog.processors.JSONRenderer(sort_keys=True)
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.get_logger(__name__).debug("Logging configured.", level=logging_config.level, format=logging_config.format)
