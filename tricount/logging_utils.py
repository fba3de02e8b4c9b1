"""Logging utilities for tricount."""
import logging
import sys

from .config import LoggingSettings


def setup_logging(settings: LoggingSettings, stream=None) -> None:
    """Setup logging configuration based on settings.

    Library modules only create loggers; this is called by the command line
    entry point.

    Args:
        settings: Logging settings configuration
        stream: Stream for the console handler, stderr by default
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.level.upper()))

    # Clear existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt=settings.format_string,
        datefmt=settings.date_format
    )
    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set component-specific levels
    for component, level in settings.component_levels.items():
        logging.getLogger(component).setLevel(getattr(logging, level.upper()))
