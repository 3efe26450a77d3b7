"""Centralized logging setup for the command line tool.

Configures the root logger to write to the console only.
"""
import logging


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger with a single console handler.

    Calling it more than once does not add duplicate handlers; the level is
    updated instead.

    Args:
        verbose: Log at DEBUG instead of INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console = next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    if console is None:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root_logger.addHandler(console)
    console.setLevel(level)

    # requests/urllib3 are noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
