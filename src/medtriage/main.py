# -*- coding: utf-8 -*-
"""Application entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from medtriage.cli.medtriage_cli import app
from medtriage.constants import APP_NAME
from medtriage.utils.logger import setup_session_logging


def main() -> int:
    """Run the command line front end with session logging."""
    session_log_path = setup_session_logging(Path.cwd(), APP_NAME)
    logger = logging.getLogger(__name__)
    if session_log_path is not None:
        logger.info("Session log file: %s", session_log_path)
    app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
