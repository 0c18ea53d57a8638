from __future__ import annotations

from typing import Any, Callable

import numpy as np

# Maps a (batch, features) array to a (batch, 1) array of probabilities
ScoringFunction = Callable[[np.ndarray], np.ndarray]


class ModelScorer:
	"""Thin wrapper hiding the underlying estimator implementation."""

	def __init__(self, model: Any) -> None:
		self._model = model

	@property
	def model(self) -> Any:
		return self._model

	def __call__(self, batch_inputs: np.ndarray) -> np.ndarray:
		if batch_inputs.ndim != 2:
			raise ValueError("Inputs must be shaped (batch, features)")
		if hasattr(self._model, "predict_proba"):
			probabilities = self._model.predict_proba(batch_inputs)
			return np.asarray(probabilities, dtype=float)[:, 1:2]
		outputs = self._model.predict(batch_inputs)
		return np.asarray(outputs, dtype=float).reshape(len(batch_inputs), -1)[:, :1]
