# -*- coding: utf-8 -*-
"""Device unlock gate consulted before showing patient data."""

from __future__ import annotations

import logging
from typing import Protocol

from medtriage.constants import UNLOCK_PROMPT

logger = logging.getLogger(__name__)


class Authenticator(Protocol):
    def has_hardware(self) -> bool: ...

    def authenticate(self, prompt: str) -> bool: ...


class AuthGate:
    """Opens once the platform authenticator succeeds.

    Devices without biometric hardware are let through without a prompt.
    A failed attempt leaves the gate closed; `unlock` may be retried.
    """

    def __init__(self, authenticator: Authenticator, prompt: str = UNLOCK_PROMPT) -> None:
        self.authenticator = authenticator
        self.prompt = prompt
        self.is_ready = False
        self.is_unlocked = False

    def unlock(self) -> bool:
        if self.is_unlocked:
            return True
        if not self.authenticator.has_hardware():
            logger.info("No biometric hardware, skipping unlock")
            self.is_unlocked = True
        else:
            self.is_unlocked = bool(self.authenticator.authenticate(self.prompt))
            if not self.is_unlocked:
                logger.warning("Unlock attempt failed")
        self.is_ready = True
        return self.is_unlocked


class AlwaysAllow:
    """Authenticator for environments without any platform prompt."""

    def has_hardware(self) -> bool:
        return False

    def authenticate(self, prompt: str) -> bool:
        return True
