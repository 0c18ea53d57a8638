"""
Runtime configuration for the Titanic survival service.

Values are read once from the environment at import time. Malformed numeric
values fall back to their defaults.
"""

from __future__ import annotations

import os
from typing import Tuple


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Model artifact
# ---------------------------------------------------------------------------

# Filesystem path or http(s) URL of the joblib-serialized classifier
MODEL_LOCATION: str = os.getenv(
    "TITANIC_MODEL_LOCATION", os.path.join("model", "titanic_model.joblib")
)
MODEL_FETCH_TIMEOUT_S = _env_float("TITANIC_MODEL_FETCH_TIMEOUT_SECONDS", 30.0)

# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------

FEATURE_NAMES: Tuple[str, ...] = ("pclass", "sex", "age", "sibsp", "parch", "fare")

# Min/max observed per feature when the model was trained
TRAIN_MIN: Tuple[float, ...] = (1.0, 0.0, 0.42, 0.0, 0.0, 0.0)
TRAIN_MAX: Tuple[float, ...] = (3.0, 1.0, 80.0, 8.0, 6.0, 512.3292)

DECISION_THRESHOLD = _env_float("TITANIC_DECISION_THRESHOLD", 0.5)

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

REQUEST_TIMEOUT_MS = _env_int("TITANIC_REQUEST_TIMEOUT_MS", 2000)
LOG_LEVEL: str = os.getenv("TITANIC_LOG_LEVEL", "INFO").strip().upper()
