"""Typst Spell - spell checking for Typst markup documents."""

import sys
from collections.abc import Callable

from loguru import logger

__version__ = "0.1.0"

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(
    log_file: str | None = None,
    level: str = "INFO",
    sink: Callable[[str], None] | None = None,
    console: bool = True,
) -> None:
    """Replace all loguru handlers with a console sink and an optional log file.

    Args:
        log_file: Optional path of a log file, rotated at 10 MB
        level: Minimum level for both sinks (DEBUG, INFO, WARNING, ERROR)
        sink: Callable receiving each formatted message. Defaults to stderr.
            The CLI passes one that prints through its rich console so log
            lines and diagnostics share one stream.
        console: Whether to add the console sink at all. Without it and
            without ``log_file`` nothing is logged.

    Example:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(log_file="typst-spell.log", level="WARNING", console=False)
    """
    logger.remove()
    if console:
        logger.add(
            sys.stderr if sink is None else sink,
            format=CONSOLE_FORMAT,
            level=level,
            colorize=sink is None,
        )

    if log_file:
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
        )


def install_exception_hook() -> None:
    """Log uncaught exceptions, with traceback, before the interpreter exits."""

    def exception_handler(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.opt(exception=(exc_type, exc_value, exc_traceback)).critical(
            f"Uncaught exception in typst-spell {__version__}"
        )

    sys.excepthook = exception_handler


__all__ = ["__version__", "configure_logging", "install_exception_hook"]
