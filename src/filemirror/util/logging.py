from __future__ import annotations

import logging

from rich.logging import RichHandler

FORMAT = "%(message)s"
DATE_FORMAT = "[%Y-%m-%d %H:%M:%S]"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def init_logging(level: str = "INFO") -> None:
    """Route all log records through a single rich handler on the root logger."""
    resolved = logging.getLevelNamesMapping().get(level.upper())
    if resolved is None:
        raise ValueError(f"Invalid logging level: {level}")

    root = logging.getLogger()
    root.setLevel(resolved)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
