import asyncio
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field

from titanic_service.inference.predictor import InferenceError, is_survivor, survival_label
from titanic_service.inference.session import ModelNotReadyError, PredictionSession
from titanic_service.metrics.prometheus import REQUEST_LATENCY_SECONDS
from titanic_service.model.loader import LoadError
from titanic_service.utils.logging import generate_request_id, get_logger

logger = get_logger()

router = APIRouter()


class PassengerRequest(BaseModel):
    pclass: int = Field(..., ge=1, le=3, description="Ticket class (1, 2 or 3)")
    sex: int = Field(..., ge=0, le=1, description="0 = male, 1 = female")
    age: Optional[float] = Field(None, ge=0, description="Age in years")
    sibsp: Optional[float] = Field(None, ge=0, description="Siblings / spouses aboard")
    parch: Optional[float] = Field(None, ge=0, description="Parents / children aboard")
    fare: Optional[float] = Field(None, ge=0, description="Passenger fare")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"pclass": 3, "sex": 0, "age": 30, "sibsp": 0, "parch": 0, "fare": 7.25}
            ]
        }
    }


class PredictResponse(BaseModel):
    probability: float
    survives: bool
    label: str


def _session(request: Request) -> PredictionSession:
    return request.app.state.session


@router.get("/health")
async def health(request: Request) -> dict:
    return {"status": "ok", "model": _session(request).model_status.value}


@router.post("/predict", response_model=PredictResponse)
async def predict(req: PassengerRequest, request: Request) -> PredictResponse:
    session = _session(request)
    request_id = generate_request_id()
    start = time.perf_counter()

    try:
        probability = await asyncio.to_thread(session.predict, req.model_dump())
    except ModelNotReadyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except InferenceError as exc:
        logger.error(
            "inference_failed",
            extra={"request_id": request_id, "path": request.url.path, "detail": str(exc)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    latency = time.perf_counter() - start
    REQUEST_LATENCY_SECONDS.observe(latency)
    logger.info(
        "prediction",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "latency_ms": round(latency * 1000, 3),
            "probability": probability,
        },
    )
    return PredictResponse(
        probability=probability,
        survives=is_survivor(probability),
        label=survival_label(probability),
    )


@router.post("/model/reload")
async def reload_model(request: Request) -> dict:
    session = _session(request)
    try:
        await session.load()
    except LoadError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return {"model": session.model_status.value}
