from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, and log file rotation logic.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path
from unittest.mock import patch

import pytest

from skimap.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""
    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if listener and isinstance(listener, QueueListener):
            if getattr(listener, "_thread", None) is not None:
                listener.stop()
            setattr(root, _QUEUE_LISTENER_ATTR, None)

        for h in list(root.handlers):
            if getattr(h, _HANDLER_TAG_ATTR, False):
                root.removeHandler(h)
                h.close()

        if hasattr(root, _CONFIGURED_FLAG_ATTR):
            delattr(root, _CONFIGURED_FLAG_ATTR)

    _reset()
    yield
    _reset()


def test_logging_idempotency() -> None:
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfiguration_replaces_listener() -> None:
    """TC-01: force=True tears down the previous listener."""
    configure_logging(LoggingConfig(level="INFO", console=True))
    root = logging.getLogger()
    first = getattr(root, _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="DEBUG", console=True), force=True)
    second = getattr(root, _QUEUE_LISTENER_ATTR)

    assert second is not first
    assert root.level == logging.DEBUG
    tagged = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]
    assert len(tagged) == 1


def test_log_rotation(tmp_path: Path) -> None:
    """TC-02: Verify file rotation when size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    backup_file = tmp_path / "test_rotate.log.1"
    assert log_file.exists()
    assert backup_file.exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """TC-03: Verify that the root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    queue_handlers = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(queue_handlers) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_unwritable_log_file_degrades_to_console(tmp_path: Path, capsys) -> None:
    """TC-04: A log file that cannot be opened does not break configuration."""
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    cfg = LoggingConfig(level="INFO", console=True, log_file=str(blocker / "app.log"))

    configure_logging(cfg)

    assert "Cannot open log file" in capsys.readouterr().err
    assert getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR) is not None


def test_default_log_path_in_user_data_dir(tmp_path: Path) -> None:
    with patch("skimap.infra.logging.core.get_user_data_dir", return_value=str(tmp_path)):
        path = get_default_log_path()
    assert path == str(tmp_path / "logs" / "skimap.log")
