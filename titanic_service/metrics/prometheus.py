from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REQUEST_LATENCY_SECONDS = Histogram(
    "titanic_request_latency_seconds",
    "End-to-end latency per prediction request",
    buckets=(0.005, 0.01, 0.02, 0.05, 0.075, 0.1, 0.25, 0.5, 1.0),
)

INFERENCE_LATENCY_SECONDS = Histogram(
    "titanic_inference_latency_seconds",
    "Time spent inside the scoring function for one passenger",
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.02, 0.05, 0.1, 0.25),
)

INFERENCE_FAILURES = Counter(
    "titanic_inference_failures_total",
    "Predictions that failed inside the scoring function",
)

INFERENCE_BUFFERS_IN_USE = Gauge(
    "titanic_inference_buffers_in_use",
    "Input batches currently allocated for an inference call",
)

MODEL_LOADS = Counter(
    "titanic_model_loads_total",
    "Model load attempts by outcome",
    ["outcome"],
)

MODEL_READY = Gauge(
    "titanic_model_ready",
    "1 when a model is loaded and ready to score, 0 otherwise",
)

REQUEST_TIMEOUTS = Counter(
    "titanic_request_timeouts_total",
    "Total requests terminated by the timeout middleware",
)

metrics_router = APIRouter()


@metrics_router.get("/metrics")
def metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
