from __future__ import annotations

import logging
import sys
import warnings
from pathlib import Path

from termprompt import logger as tui_logger
from termprompt.logger import LogManager, init_log_manager


def _has_tty_handler(log: logging.Logger) -> bool:
    for handler in log.handlers:
        if isinstance(handler, logging.StreamHandler):
            stream = getattr(handler, "stream", None)
            if stream in (sys.stdout, sys.stderr):
                return True
    return False


def test_log_manager_disables_tty_and_captures() -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_stream_handler = logging.StreamHandler(sys.stdout)
    root_logger.addHandler(root_stream_handler)

    named_logger = logging.getLogger("existing.nonprop")
    named_logger.setLevel(logging.INFO)
    named_logger.propagate = False
    named_stream_handler = logging.StreamHandler(sys.stdout)
    named_logger.addHandler(named_stream_handler)

    manager = init_log_manager(max_entries=None)
    assert isinstance(manager, LogManager)
    assert tui_logger.get_log_manager() is manager

    assert not _has_tty_handler(root_logger)
    assert not _has_tty_handler(named_logger)

    root_logger.warning("root warning message")
    named_logger.info("named logger message")

    records = manager.get_records()
    messages = [record.message for record in records]
    assert "root warning message" in messages
    assert "named logger message" in messages


def test_log_manager_captures_warnings() -> None:
    manager = init_log_manager(max_entries=None)
    assert isinstance(manager, LogManager)
    warnings.warn("warning from warnings module", UserWarning)

    records = manager.get_records()
    messages = [record.message for record in records]
    assert any("warning from warnings module" in message for message in messages)


def test_log_manager_keeps_last_entries() -> None:
    manager = LogManager(max_entries=2)
    for index in range(3):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, f"m{index}", None, None)
        manager.add_record(record)

    assert [r.message for r in manager.get_records()] == ["m1", "m2"]
    manager.clear()
    assert manager.get_records() == []


def test_configure_logging_writes_structlog_events(tmp_path: Path) -> None:
    log_file = tmp_path / "prompt.log"
    tui_logger.configure_logging("debug", log_file)
    try:
        tui_logger.logger.info("Prompt completed", length=5)
    finally:
        tui_logger.configure_logging("info", None)

    text = log_file.read_text(encoding="utf-8")
    assert "Prompt completed" in text
    assert "length=5" in text
    assert logging.getLogger().level == logging.INFO
