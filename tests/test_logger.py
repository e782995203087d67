# -*- coding: utf-8 -*-
"""Tests for session logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from medtriage.utils.logger import setup_session_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    for attr in ("_medtriage_logging_configured", "_medtriage_session_log"):
        if hasattr(root, attr):
            delattr(root, attr)


def test_session_log_file_created(tmp_path: Path, clean_root_logger) -> None:
    log_path = setup_session_logging(tmp_path, "Med Triage")
    assert log_path is not None
    assert log_path.parent == tmp_path / "logs"
    assert log_path.name.startswith("med-triage-")
    logging.getLogger("medtriage.test").info("hello")
    assert log_path.exists()


def test_setup_is_idempotent(tmp_path: Path, clean_root_logger) -> None:
    first = setup_session_logging(tmp_path, "medtriage")
    count = len(clean_root_logger.handlers)
    assert setup_session_logging(tmp_path, "medtriage") == first
    assert len(clean_root_logger.handlers) == count
