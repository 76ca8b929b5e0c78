"""
Shared utilities for CLI commands.
"""

import logging

logger = logging.getLogger(__name__)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(verbose: bool = False, level: str = "info") -> None:
    """
    Configure logging for CLI.

    Args:
        verbose: If True, enable DEBUG level logging regardless of level
        level: Configured level name (debug, info, warning, error)
    """
    log_level = logging.DEBUG if verbose else _LEVELS.get(level, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Handshake noise from scanners and health checks
    if not verbose:
        logging.getLogger("websockets").setLevel(logging.WARNING)
