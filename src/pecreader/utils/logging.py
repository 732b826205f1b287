import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


# =============================================================================
# Console Management
# =============================================================================

_console = None


def get_console() -> Console:
    """Get the global Rich console instance for direct Rich output."""
    global _console
    if _console is None:
        custom_theme = Theme({
            "repr.path": "default",   # no color for paths
            "repr.filename": "default",
            "log.message": "default",
        })
        _console = Console(theme=custom_theme)
    return _console


# =============================================================================
# Logger Setup
# =============================================================================

def setup_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """
    Sets up logging with a RichHandler on the root logger.

    Does nothing if the root logger already has handlers, so repeated calls
    never duplicate output.

    Parameters
    ----------
    level : str, optional
        The logging level, by default "INFO"
    console : Console, optional
        Console to log to, by default the global console
    """
    log = logging.getLogger()

    if log.handlers:
        return

    handler = RichHandler(
        console=console or get_console(),
        rich_tracebacks=True,
        show_time=True,
        markup=False,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    log.setLevel(level)
