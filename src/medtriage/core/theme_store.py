# -*- coding: utf-8 -*-
"""Persisted light/dark theme preference."""

from __future__ import annotations

import logging

from medtriage.constants import THEME_KEY
from medtriage.utils.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DARK = "dark"
LIGHT = "light"


class ThemeStore:
    """Read and toggle the theme flag kept next to the history."""

    def __init__(self, store: KeyValueStore, key: str = THEME_KEY) -> None:
        self.store = store
        self.key = key

    def is_dark(self) -> bool:
        try:
            return self.store.get(self.key) == DARK
        except (OSError, ValueError) as exc:
            logger.warning("Could not read theme preference, using light: %s", exc)
            return False

    def set_dark(self, dark: bool) -> None:
        self.store.set(self.key, DARK if dark else LIGHT)

    def toggle(self) -> bool:
        """Flip the preference and return the new dark flag."""
        dark = not self.is_dark()
        self.set_dark(dark)
        logger.info("Theme switched to %s", DARK if dark else LIGHT)
        return dark
