from __future__ import annotations

import logging
import logging.handlers

import pytest

from rn_sync.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _restore_root():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in saved[0]:
        root.addHandler(h)
    root.setLevel(saved[1])


def test_file_and_console_handlers(tmp_path) -> None:
    path = setup_logging("debug", component="bridge", base_dir=tmp_path)
    root = logging.getLogger()

    assert path == tmp_path / "bridge" / "bridge.log"
    assert root.level == logging.DEBUG
    kinds = {type(h) for h in root.handlers}
    assert logging.handlers.TimedRotatingFileHandler in kinds
    assert logging.StreamHandler in kinds

    logging.getLogger("rn_sync.test").info("hello %d", 5)
    for h in root.handlers:
        h.flush()
    assert "INFO rn_sync.test - hello 5" in path.read_text(encoding="utf-8")


def test_console_only(tmp_path) -> None:
    assert setup_logging("INFO", base_dir=None) is None
    assert len(logging.getLogger().handlers) == 1


def test_unknown_level_defaults_to_info(tmp_path) -> None:
    setup_logging("chatty", base_dir=tmp_path)
    assert logging.getLogger().level == logging.INFO
