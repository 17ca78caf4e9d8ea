"""Console logging for hosts embedding the parser."""

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "block_parser"


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure root logging with a Rich handler.

    Verbose mode lowers only the parser's own loggers to DEBUG, so per-block
    dispatch traces show up without debug output from the host's libraries.

    Args:
        verbose: Emit the parser's debug messages
        quiet: Only warnings and errors from the host's libraries

    Returns:
        The parser's package logger
    """
    root_level = logging.WARNING if quiet else logging.INFO
    package_level = logging.DEBUG if verbose else root_level

    handler = RichHandler(
        console=None,  # Use default stderr
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(root_level)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(package_level)
    return package_logger
