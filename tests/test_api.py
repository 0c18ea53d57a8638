"""Integration tests for the HTTP endpoints."""

import numpy as np
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from httpx import AsyncClient, ASGITransport

from titanic_service.inference.session import PredictionSession
from titanic_service.main import create_app
from titanic_service.model.loader import LoadError

PASSENGER = {"pclass": 3, "sex": 0, "age": 30, "sibsp": 0, "parch": 0, "fare": 7.25}


def _make_scoring(value: float = 0.1):
    return MagicMock(return_value=np.array([[value]], dtype=np.float32))


async def _app_with(loader):
    application = create_app()
    # Startup events don't fire under httpx, so wire the session by hand
    session = PredictionSession(loader=loader, location="model.joblib")
    try:
        await session.load()
    except LoadError:
        pass
    application.state.session = session
    return application


@pytest_asyncio.fixture
async def app():
    application = await _app_with(AsyncMock(return_value=_make_scoring(0.1)))
    yield application
    application.state.session.close()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_reports_model_status(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "model": "ready"}


class TestPredictEndpoint:
    @pytest.mark.asyncio
    async def test_predict_returns_probability_and_label(self, client):
        resp = await client.post("/predict", json=PASSENGER)
        assert resp.status_code == 200
        data = resp.json()
        assert data["probability"] == pytest.approx(0.1)
        assert data["survives"] is False
        assert data["label"] == "does not survive"

    @pytest.mark.asyncio
    async def test_optional_fields_may_be_omitted(self, client):
        resp = await client.post("/predict", json={"pclass": 1, "sex": 1})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {**PASSENGER, "age": -1},
            {**PASSENGER, "fare": -0.01},
            {**PASSENGER, "pclass": 4},
            {**PASSENGER, "sex": 2},
            {"age": 30},
        ],
    )
    async def test_invalid_passenger_rejected(self, client, body):
        resp = await client.post("/predict", json=body)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_predict_missing_body_rejected(self, client):
        resp = await client.post("/predict")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_inference_failure_returns_500(self):
        app = await _app_with(
            AsyncMock(return_value=MagicMock(side_effect=RuntimeError("graph error")))
        )
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post("/predict", json=PASSENGER)
        assert resp.status_code == 500
        assert "graph error" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_non_numeric_model_output_returns_500_with_detail(self):
        app = await _app_with(AsyncMock(return_value=MagicMock(return_value=[["abc"]])))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post("/predict", json=PASSENGER)
        assert resp.status_code == 500
        assert "unusable output" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_model_not_ready_returns_503(self):
        app = await _app_with(AsyncMock(side_effect=LoadError("artifact missing")))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post("/predict", json=PASSENGER)
            health = await client.get("/health")
        assert resp.status_code == 503
        assert health.json()["model"] == "load_failed"


class TestReloadEndpoint:
    @pytest.mark.asyncio
    async def test_reload_recovers_after_failed_load(self):
        loader = AsyncMock(side_effect=[LoadError("offline"), _make_scoring(0.9)])
        app = await _app_with(loader)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            reload_resp = await client.post("/model/reload")
            resp = await client.post("/predict", json=PASSENGER)
        assert reload_resp.status_code == 200
        assert reload_resp.json() == {"model": "ready"}
        assert resp.json()["label"] == "survives"

    @pytest.mark.asyncio
    async def test_reload_failure_returns_503(self):
        loader = AsyncMock(side_effect=LoadError("offline"))
        app = await _app_with(loader)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post("/model/reload")
        assert resp.status_code == 503
        assert "offline" in resp.json()["detail"]


class TestMetricsEndpoint:
    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client):
        await client.post("/predict", json=PASSENGER)
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        body = resp.text
        assert "titanic_request_latency_seconds" in body
        assert "titanic_inference_buffers_in_use" in body
        assert "titanic_model_ready" in body
