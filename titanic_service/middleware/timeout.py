from __future__ import annotations

import asyncio

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from titanic_service.config import REQUEST_TIMEOUT_MS
from titanic_service.metrics.prometheus import REQUEST_TIMEOUTS
from titanic_service.utils.logging import get_logger

logger = get_logger()


class TimeoutMiddleware(BaseHTTPMiddleware):
	"""Caps how long a single HTTP request may take."""

	def __init__(self, app, *, timeout_ms: int = REQUEST_TIMEOUT_MS) -> None:
		super().__init__(app)
		self._timeout_seconds = timeout_ms / 1000

	async def dispatch(
		self, request: Request, call_next: RequestResponseEndpoint
	) -> Response:
		try:
			return await asyncio.wait_for(
				call_next(request), timeout=self._timeout_seconds
			)
		except asyncio.TimeoutError:
			REQUEST_TIMEOUTS.inc()
			logger.warning(
				"request_timeout",
				extra={
					"method": request.method,
					"path": request.url.path,
					"status_code": status.HTTP_504_GATEWAY_TIMEOUT,
				},
			)
			return JSONResponse(
				status_code=status.HTTP_504_GATEWAY_TIMEOUT,
				content={"detail": "Request timed out"},
			)
