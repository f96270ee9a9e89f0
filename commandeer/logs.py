"""
Commandeer logging setup.

Modules log through logging.getLogger(__name__); configure() routes the
"commandeer" logger hierarchy to a rich console handler.
"""
import logging

from rich.logging import RichHandler

from .faults import console


def configure(level=logging.INFO, /, *, tracebacks=True):
    """
    Install a RichHandler on the "commandeer" logger and set its level.

    Calling it again replaces the previously installed handler.
    """
    logger = logging.getLogger("commandeer")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=console, rich_tracebacks=tracebacks, markup=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "configure",
)
