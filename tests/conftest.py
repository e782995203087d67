# -*- coding: utf-8 -*-
"""Shared pytest fixtures."""

from __future__ import annotations

import base64
import sys
from pathlib import Path
from typing import Any

import pytest


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


PNG_1X1_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO7+fJ8AAAAASUVORK5CYII="
PNG_1X1_BYTES = base64.b64decode(PNG_1X1_B64)


def make_payload(patient_name: str = "J. Doe", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "patientName": patient_name,
        "analysisDate": "2024-01-01",
        "findings": [
            {"name": "Infiltration", "score": 72.3},
            {"name": "Nodule", "score": 12.0},
        ],
        "imageBase64": f"data:image/png;base64,{PNG_1X1_B64}",
    }
    payload.update(overrides)
    return payload


class FakeTransport:
    """Records calls and replays a canned response or error."""

    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = response if response is not None else make_payload()
        self.error = error
        self.calls: list[tuple[Path, str]] = []

    def analyze(self, file_path: Path, file_name: str) -> Any:
        self.calls.append((file_path, file_name))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return make_payload()


@pytest.fixture
def sample_result():
    from medtriage.models.analysis_result import validate_result

    return validate_result(make_payload())


@pytest.fixture
def sample_dicom(tmp_path: Path) -> Path:
    path = tmp_path / "chest_pa.dcm"
    path.write_bytes(b"\x00" * 128 + b"DICM" + b"\x00" * 16)
    return path


@pytest.fixture
def memory_store():
    from medtriage.utils.kv_store import MemoryStore

    return MemoryStore()


@pytest.fixture
def file_store(tmp_path: Path):
    from medtriage.utils.kv_store import JsonFileStore

    return JsonFileStore(tmp_path / "store.json")


@pytest.fixture
def default_config() -> dict:
    from medtriage.config import get_default_config

    return get_default_config()
