"""Console and logging setup for the terminal front-end.

Library modules only create loggers with ``logging.getLogger(__name__)``.
Handlers are installed by ``configure_logging``, which the CLI calls once.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

CONSOLE = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route ``skyfleet`` log records to the shared rich console.

    Args:
        verbose (bool): Emit DEBUG records when True, WARNING and above otherwise.
    """
    logger = logging.getLogger("skyfleet")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=CONSOLE, show_path=verbose, rich_tracebacks=True))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
