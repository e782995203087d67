# -*- coding: utf-8 -*-
"""Session logging setup: console + one log file per run."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def setup_session_logging(base_dir: str | Path, app_name: str) -> Path | None:
    """Configure root logging for the app with one log file per session.

    Console output stays at WARNING unless MEDTRIAGE_DEBUG is set; the
    session file always records DEBUG.
    """
    root = logging.getLogger()
    if getattr(root, "_medtriage_logging_configured", False):
        return getattr(root, "_medtriage_session_log", None)

    root.setLevel(logging.DEBUG)
    console_level = logging.DEBUG if _env_bool("MEDTRIAGE_DEBUG") else logging.WARNING
    formatter = logging.Formatter(
        "%(asctime)s [%(threadName)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    if not any(isinstance(handler, logging.StreamHandler) for handler in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(console_level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    logs_dir = Path(base_dir) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    safe_app_name = app_name.lower().replace(" ", "-")
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

    session_log_path: Path | None = logs_dir / f"{safe_app_name}-{timestamp}.log"
    try:
        file_handler = logging.FileHandler(session_log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        root.info("Session log file established: %s", session_log_path)
    except OSError as e:
        root.error("Failed to establish session log file: %s", e)
        session_log_path = None

    root._medtriage_logging_configured = True  # type: ignore[attr-defined]
    root._medtriage_session_log = session_log_path  # type: ignore[attr-defined]
    return session_log_path
