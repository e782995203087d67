# -*- coding: utf-8 -*-
"""Tests for the theme preference and unlock gate."""

from __future__ import annotations

from medtriage.constants import THEME_KEY, UNLOCK_PROMPT
from medtriage.core.auth_gate import AlwaysAllow, AuthGate
from medtriage.core.theme_store import ThemeStore
from medtriage.utils.kv_store import MemoryStore


class _BrokenStore:
    def get(self, key: str) -> str | None:
        raise OSError("unreadable")

    def set(self, key: str, value: str) -> None:
        raise OSError("unwritable")


class _FakeAuthenticator:
    def __init__(self, hardware: bool, answers: list[bool]) -> None:
        self.hardware = hardware
        self.answers = list(answers)
        self.prompts: list[str] = []

    def has_hardware(self) -> bool:
        return self.hardware

    def authenticate(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answers.pop(0)


def test_theme_defaults_to_light(memory_store) -> None:
    assert ThemeStore(memory_store).is_dark() is False


def test_theme_toggle_persists(memory_store) -> None:
    theme = ThemeStore(memory_store)
    assert theme.toggle() is True
    assert memory_store.get(THEME_KEY) == "dark"
    assert ThemeStore(memory_store).is_dark() is True
    assert theme.toggle() is False
    assert memory_store.get(THEME_KEY) == "light"


def test_unknown_theme_value_is_light() -> None:
    assert ThemeStore(MemoryStore({THEME_KEY: "solarized"})).is_dark() is False


def test_unreadable_theme_is_light() -> None:
    assert ThemeStore(_BrokenStore()).is_dark() is False


def test_gate_opens_without_hardware() -> None:
    authenticator = _FakeAuthenticator(hardware=False, answers=[])
    gate = AuthGate(authenticator)
    assert gate.unlock() is True
    assert authenticator.prompts == []
    assert gate.is_ready


def test_gate_prompts_and_allows_retry() -> None:
    authenticator = _FakeAuthenticator(hardware=True, answers=[False, True])
    gate = AuthGate(authenticator)
    assert gate.unlock() is False
    assert gate.is_ready and not gate.is_unlocked
    assert gate.unlock() is True
    assert authenticator.prompts == [UNLOCK_PROMPT, UNLOCK_PROMPT]


def test_unlocked_gate_does_not_prompt_again() -> None:
    authenticator = _FakeAuthenticator(hardware=True, answers=[True])
    gate = AuthGate(authenticator)
    gate.unlock()
    assert gate.unlock() is True
    assert len(authenticator.prompts) == 1


def test_always_allow_authenticator() -> None:
    assert AuthGate(AlwaysAllow()).unlock() is True
