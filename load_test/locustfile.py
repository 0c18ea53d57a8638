"""
Locust load-test scenario for the Titanic survival service.

Usage (headless):
  locust -f load_test/locustfile.py --headless -u 50 -r 10 -t 2m

Environment variables:
  TARGET_HOST       Base URL (default: http://localhost:8000)
  ALLOW_503         Treat 503 (model not ready) as success (default: 0)
"""

from __future__ import annotations

import os
import random
from typing import Dict

from locust import HttpUser, between, task

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


REQUEST_TIMEOUT_S = _env_float("REQUEST_TIMEOUT_SECONDS", 2.0)
ALLOW_503 = os.getenv("ALLOW_503", "0").strip() == "1"

_rng = random.Random(0)


def _random_passenger() -> Dict[str, float]:
    passenger: Dict[str, float] = {
        "pclass": _rng.choice((1, 2, 3)),
        "sex": _rng.choice((0, 1)),
        "age": round(_rng.uniform(0.42, 80.0), 1),
        "sibsp": _rng.randint(0, 8),
        "parch": _rng.randint(0, 6),
        "fare": round(_rng.uniform(0.0, 512.3292), 2),
    }
    # Exercise the zero-default path for optional fields
    if _rng.random() < 0.1:
        del passenger["age"]
    return passenger


# ---------------------------------------------------------------------------
# User class
# ---------------------------------------------------------------------------

class PassengerUser(HttpUser):
    """Simulates a client calling /predict and /health."""

    host = os.getenv("TARGET_HOST", "http://localhost:8000")
    wait_time = between(0.05, 0.15)

    @task(20)
    def predict(self) -> None:
        with self.client.post(
            "/predict",
            json=_random_passenger(),
            timeout=REQUEST_TIMEOUT_S,
            name="/predict",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 503 and ALLOW_503:
                resp.success()
            else:
                resp.failure(f"status {resp.status_code}")

    @task(1)
    def health(self) -> None:
        self.client.get("/health", name="/health", timeout=REQUEST_TIMEOUT_S)
