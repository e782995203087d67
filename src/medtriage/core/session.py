# -*- coding: utf-8 -*-
"""Explicitly owned application context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from medtriage.constants import DEFAULT_STORE_FILE, HISTORY_CAPACITY
from medtriage.core.auth_gate import AlwaysAllow, Authenticator, AuthGate
from medtriage.core.history_cache import HistoryCache
from medtriage.core.scan_controller import ScanJobController
from medtriage.core.theme_store import ThemeStore
from medtriage.integrations.analysis_client import AnalysisClient, AnalysisTransport
from medtriage.pipeline.exporter import Exporter
from medtriage.utils.kv_store import JsonFileStore, KeyValueStore


@dataclass
class AppSession:
    """Everything one running app needs, wired once and passed around."""

    settings: dict[str, Any]
    store: KeyValueStore
    history: HistoryCache
    controller: ScanJobController
    theme: ThemeStore
    exporter: Exporter
    auth_gate: AuthGate

    @classmethod
    def from_settings(
        cls,
        settings: dict[str, Any],
        *,
        base_dir: str | Path | None = None,
        transport: AnalysisTransport | None = None,
        store: KeyValueStore | None = None,
        authenticator: Authenticator | None = None,
    ) -> AppSession:
        root = Path(base_dir) if base_dir is not None else Path.cwd()
        history_settings = settings.get("history", {})
        export_settings = settings.get("export", {})

        if store is None:
            store_path = Path(str(history_settings.get("store_path", DEFAULT_STORE_FILE)))
            store = JsonFileStore(store_path if store_path.is_absolute() else root / store_path)
        history = HistoryCache(store, capacity=HISTORY_CAPACITY)
        controller = ScanJobController(transport or AnalysisClient.from_settings(settings), history)

        output_dir = Path(str(export_settings.get("output_dir", "reports")))
        exporter = Exporter(
            output_dir if output_dir.is_absolute() else root / output_dir,
            export_format=str(export_settings.get("format", "markdown")),
        )
        return cls(
            settings=settings,
            store=store,
            history=history,
            controller=controller,
            theme=ThemeStore(store),
            exporter=exporter,
            auth_gate=AuthGate(authenticator or AlwaysAllow()),
        )

    def close(self) -> None:
        self.controller.shutdown()
