import logging

from rich.logging import RichHandler

from .config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Route the root logger through rich. Safe to call more than once."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        root.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
