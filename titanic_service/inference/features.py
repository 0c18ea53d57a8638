from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

from titanic_service.config import FEATURE_NAMES, TRAIN_MAX, TRAIN_MIN

# Fields that fall back to 0 when missing
OPTIONAL_FEATURES: Tuple[str, ...] = ("age", "sibsp", "parch", "fare")


@dataclass(frozen=True)
class TrainingBounds:
	"""Per-feature (min, max) statistics fixed when the model was trained."""

	minimum: Tuple[float, ...]
	maximum: Tuple[float, ...]

	def normalize(self, raw: Sequence[float]) -> np.ndarray:
		return normalize(raw, self.minimum, self.maximum)


TRAINING_BOUNDS = TrainingBounds(minimum=TRAIN_MIN, maximum=TRAIN_MAX)


def normalize(
	raw: Sequence[float],
	minimum: Sequence[float] = TRAIN_MIN,
	maximum: Sequence[float] = TRAIN_MAX,
) -> np.ndarray:
	"""Min-max scale ``raw`` column by column.

	Features whose training range is degenerate (min == max) map to 0.
	Values outside the training range are not clamped.
	"""
	values = np.asarray(raw, dtype=float)
	low = np.asarray(minimum, dtype=float)
	span = np.asarray(maximum, dtype=float) - low
	degenerate = span == 0
	scaled = (values - low) / np.where(degenerate, 1.0, span)
	return np.where(degenerate, 0.0, scaled)


def _optional(value: Optional[Any]) -> float:
	if value is None:
		return 0.0
	value = float(value)
	if math.isnan(value):
		return 0.0
	return value


def build_feature_vector(inputs: Mapping[str, Any]) -> np.ndarray:
	"""Order named passenger attributes as ``FEATURE_NAMES``.

	``pclass`` and ``sex`` are required; the remaining fields default to 0
	when absent, None or NaN.
	"""
	missing = [name for name in ("pclass", "sex") if inputs.get(name) is None]
	if missing:
		raise ValueError(f"Missing required features: {', '.join(missing)}")

	row = []
	for name in FEATURE_NAMES:
		if name in OPTIONAL_FEATURES:
			row.append(_optional(inputs.get(name)))
		else:
			row.append(float(inputs[name]))
	return np.asarray(row, dtype=float)
