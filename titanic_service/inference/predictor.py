from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import numpy as np

from titanic_service.config import DECISION_THRESHOLD, FEATURE_NAMES
from titanic_service.inference.features import build_feature_vector, normalize
from titanic_service.inference.scorer import ScoringFunction
from titanic_service.metrics.prometheus import (
	INFERENCE_BUFFERS_IN_USE,
	INFERENCE_FAILURES,
	INFERENCE_LATENCY_SECONDS,
)

SURVIVES = "survives"
DOES_NOT_SURVIVE = "does not survive"


class InferenceError(RuntimeError):
	"""Raised when the scoring function fails or produces no output."""


@contextmanager
def _input_batch(normalized: np.ndarray) -> Iterator[np.ndarray]:
	"""Own a single-row float32 batch for the duration of one call."""
	batch = np.empty((1, len(FEATURE_NAMES)), dtype=np.float32)
	with INFERENCE_BUFFERS_IN_USE.track_inprogress():
		try:
			batch[0, :] = normalized
			yield batch
		finally:
			batch.fill(0.0)


def _first_scalar(output: Any) -> float:
	if output is None:
		raise InferenceError("Scoring function returned no output")
	try:
		values = np.asarray(output, dtype=float).ravel()
	except (TypeError, ValueError) as exc:
		raise InferenceError(f"Scoring function returned unusable output: {exc}") from exc
	if values.size == 0:
		raise InferenceError("Scoring function returned an empty output")
	return float(values[0])


def predict(model: ScoringFunction, raw: Mapping[str, Any]) -> float:
	"""Normalize a passenger's attributes and score them with ``model``.

	Returns the survival probability. Any failure inside the scoring call
	is raised as ``InferenceError`` with the original exception chained.
	"""
	normalized = normalize(build_feature_vector(raw))

	start = time.perf_counter()
	with _input_batch(normalized) as batch:
		try:
			output = model(batch)
		except Exception as exc:
			INFERENCE_FAILURES.inc()
			raise InferenceError(f"Scoring function failed: {exc}") from exc
		try:
			probability = _first_scalar(output)
		except InferenceError:
			INFERENCE_FAILURES.inc()
			raise
	INFERENCE_LATENCY_SECONDS.observe(time.perf_counter() - start)
	return probability


def is_survivor(probability: float, threshold: float = DECISION_THRESHOLD) -> bool:
	return probability >= threshold


def survival_label(probability: float, threshold: float = DECISION_THRESHOLD) -> str:
	return SURVIVES if is_survivor(probability, threshold) else DOES_NOT_SURVIVE
