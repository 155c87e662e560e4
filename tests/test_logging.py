import logging

import pytest
from rich.logging import RichHandler

from filemirror.util.logging import get_logger, init_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_init_logging_installs_single_rich_handler(restore_root_logger) -> None:
    init_logging("debug")
    init_logging("warning")

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)


def test_init_logging_rejects_unknown_level(restore_root_logger) -> None:
    with pytest.raises(ValueError):
        init_logging("chatty")


def test_get_logger_uses_module_name() -> None:
    assert get_logger("filemirror.cache.entry").name == "filemirror.cache.entry"
