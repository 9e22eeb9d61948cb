"""
structlog configuration for the trace engine.

Library modules get their logger from ``get_logger(__name__)``: a structlog
``BoundLogger`` wrapped around the standard library logger of the same name.
The ``cryptotrace`` logger carries only a ``NullHandler``, so the library
stays silent until the application (the CLI, the demo) calls
``configure_logging``. An application that already configures the
standard ``logging`` module receives the events through propagation.
"""

import logging
import sys

import structlog


PACKAGE_LOGGER = "cryptotrace"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_handler = None


def get_logger(name: str):
    """structlog logger backed by the standard library logger ``name``."""
    return structlog.wrap_logger(logging.getLogger(name),
                                 wrapper_class=structlog.stdlib.BoundLogger)


def configure_logging(level: str = "warning", json_output: bool = False) -> None:
    """
    Configure structlog processors and attach a stderr handler.

    Events go to stderr so they never mix with JSON records on stdout.
    Calling it again replaces the handler installed by the previous call.

    Args:
        level: One of debug, info, warning, error
        json_output: Render events as JSON instead of the console format

    Raises:
        ValueError: If the level name is unknown
    """
    global _handler

    try:
        numeric_level = LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}; expected one of {sorted(LEVELS)}")

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        package_logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(_handler)
    package_logger.setLevel(numeric_level)


def reset_logging() -> None:
    """Remove the handler and level set by ``configure_logging``."""
    global _handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        package_logger.removeHandler(_handler)
        _handler = None
    package_logger.setLevel(logging.NOTSET)
    structlog.reset_defaults()
