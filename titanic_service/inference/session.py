"""
Load and prediction state for the hosting application.

The core (``features`` and ``predictor``) keeps no state between calls. This
module owns what the service needs to remember: which model is loaded,
whether the last load failed, and the last successful prediction.
"""

from __future__ import annotations

import enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from titanic_service.config import MODEL_LOCATION
from titanic_service.inference.predictor import InferenceError, predict
from titanic_service.inference.scorer import ScoringFunction
from titanic_service.metrics.prometheus import MODEL_LOADS, MODEL_READY
from titanic_service.model.loader import LoadError, load_model
from titanic_service.utils.logging import get_logger

logger = get_logger()

ModelLoader = Callable[[str], Awaitable[ScoringFunction]]


class ModelStatus(str, enum.Enum):
	IDLE = "idle"
	LOADING = "loading"
	READY = "ready"
	LOAD_FAILED = "load_failed"


class PredictionStatus(str, enum.Enum):
	IDLE = "idle"
	PREDICTING = "predicting"
	PREDICTED = "predicted"
	INFERENCE_FAILED = "inference_failed"


class ModelNotReadyError(RuntimeError):
	"""Raised when a prediction is requested before a model is loaded."""


class PredictionSession:
	def __init__(
		self,
		*,
		loader: ModelLoader = load_model,
		location: str = MODEL_LOCATION,
	) -> None:
		self._loader = loader
		self._location = location
		self._model: Optional[ScoringFunction] = None
		self._generation = 0
		self.model_status = ModelStatus.IDLE
		self.prediction_status = PredictionStatus.IDLE
		self.last_error: Optional[str] = None
		self.last_result: Optional[float] = None

	@property
	def ready(self) -> bool:
		return self.model_status is ModelStatus.READY

	@property
	def location(self) -> str:
		return self._location

	async def load(self) -> None:
		"""Load the model, replacing any previously loaded one on success.

		A result that arrives after a newer ``load()`` or after ``close()``
		is discarded.
		"""
		self._generation += 1
		generation = self._generation
		self.model_status = ModelStatus.LOADING
		MODEL_READY.set(0)

		try:
			model = await self._loader(self._location)
		except LoadError as exc:
			if self._record_load_failure(generation, exc):
				raise
			return
		except Exception as exc:
			# Injected loaders may raise anything; surface it as a LoadError
			error = LoadError(f"Could not load model from {self._location}: {exc}")
			if self._record_load_failure(generation, error):
				raise error from exc
			return

		MODEL_LOADS.labels(outcome="success").inc()
		if generation != self._generation:
			logger.info("stale_model_load_discarded", extra={"model_location": self._location})
			return
		self._model = model
		self.model_status = ModelStatus.READY
		self.last_error = None
		MODEL_READY.set(1)

	def _record_load_failure(self, generation: int, exc: LoadError) -> bool:
		"""Record a failed load; returns False when the load was already stale."""
		MODEL_LOADS.labels(outcome="failure").inc()
		if generation != self._generation:
			return False
		self._model = None
		self.model_status = ModelStatus.LOAD_FAILED
		self.last_error = str(exc)
		logger.error(
			"model_load_failed",
			extra={"model_location": self._location, "detail": str(exc)},
		)
		return True

	def close(self) -> None:
		"""Drop the model and ignore any load still in flight."""
		self._generation += 1
		self._model = None
		self.model_status = ModelStatus.IDLE
		MODEL_READY.set(0)

	def predict(self, inputs: Mapping[str, Any]) -> float:
		model = self._model
		if model is None or not self.ready:
			raise ModelNotReadyError(f"Model is not ready (status={self.model_status.value})")

		self.prediction_status = PredictionStatus.PREDICTING
		try:
			probability = predict(model, inputs)
		except InferenceError as exc:
			self.prediction_status = PredictionStatus.INFERENCE_FAILED
			self.last_error = str(exc)
			raise
		except ValueError:
			# Rejected inputs never reached the model
			self.prediction_status = PredictionStatus.IDLE
			raise

		self.prediction_status = PredictionStatus.PREDICTED
		self.last_error = None
		self.last_result = probability
		return probability
