from __future__ import annotations

import asyncio
import io
from typing import Any

import httpx
import joblib

from titanic_service.config import MODEL_FETCH_TIMEOUT_S, MODEL_LOCATION
from titanic_service.inference.scorer import ModelScorer, ScoringFunction
from titanic_service.utils.logging import get_logger

logger = get_logger()


class LoadError(RuntimeError):
	"""Raised when the model artifact cannot be fetched or deserialized."""


def _is_url(location: str) -> bool:
	return location.startswith(("http://", "https://"))


async def _fetch(url: str) -> bytes:
	async with httpx.AsyncClient(timeout=MODEL_FETCH_TIMEOUT_S) as client:
		resp = await client.get(url)
		resp.raise_for_status()
		return resp.content


async def _deserialize(location: str) -> Any:
	if _is_url(location):
		payload = await _fetch(location)
		return await asyncio.to_thread(joblib.load, io.BytesIO(payload))
	return await asyncio.to_thread(joblib.load, location)


async def load_model(location: str = MODEL_LOCATION) -> ScoringFunction:
	"""Fetch and deserialize the classifier at ``location``.

	``location`` may be a filesystem path or an http(s) URL. The estimator
	is wrapped in a ``ModelScorer``. There is no retry: any failure is
	raised as ``LoadError``.
	"""
	try:
		model = await _deserialize(location)
	except Exception as exc:
		raise LoadError(f"Could not load model from {location}: {exc}") from exc

	logger.info("model_loaded", extra={"model_location": location})
	return ModelScorer(model)
