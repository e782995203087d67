# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "medtriage"

DEFAULT_SETTINGS_FILE = "settings.json"
DEFAULT_STORE_FILE = "medtriage_store.json"

HISTORY_CAPACITY = 50
HISTORY_KEY = "scan_history"
THEME_KEY = "theme"

DETECTION_THRESHOLD = 50.0
SCORE_MIN = 0.0
SCORE_MAX = 100.0

REPORT_TITLE = "MedTriage AI"
REPORT_SUBTITLE = "AI-assisted chest X-ray triage report"
UNLOCK_PROMPT = "Unlock MedTriage"

# ChestX-ray14 labels returned by the analysis service.
KNOWN_CONDITIONS = (
    "Atelectasis",
    "Cardiomegaly",
    "Consolidation",
    "Edema",
    "Effusion",
    "Emphysema",
    "Fibrosis",
    "Hernia",
    "Infiltration",
    "Mass",
    "Nodule",
    "Pleural_Thickening",
    "Pneumonia",
    "Pneumothorax",
)
