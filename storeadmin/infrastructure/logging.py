"""Logging setup.

Routes structlog through the standard library so that the host
application's handlers and levels apply.
"""

import logging
import sys

import structlog

from storeadmin.infrastructure.config import Settings, settings as default_settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure stdlib logging and structlog processors.

    Args:
        config: Settings to read the level and renderer from; the
            module-level settings are used when omitted.
    """
    config = config or default_settings
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
