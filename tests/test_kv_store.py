# -*- coding: utf-8 -*-
"""Tests for the JSON-file key-value store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from medtriage.utils.kv_store import JsonFileStore


def test_missing_file_reads_as_absent(tmp_path: Path) -> None:
    assert JsonFileStore(tmp_path / "none.json").get("theme") is None


def test_set_then_get(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "store.json")
    store.set("theme", "dark")
    store.set("scan_history", "[]")
    assert store.get("theme") == "dark"
    assert json.loads((tmp_path / "store.json").read_text(encoding="utf-8")) == {
        "theme": "dark",
        "scan_history": "[]",
    }


def test_set_leaves_no_temp_files(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "store.json")
    for index in range(5):
        store.set("k", str(index))
    assert [path.name for path in tmp_path.iterdir()] == ["store.json"]


def test_corrupt_file_raises_on_get(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(ValueError):
        JsonFileStore(path).get("theme")


def test_set_recovers_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = JsonFileStore(path)
    store.set("theme", "light")
    assert store.get("theme") == "light"
