from fastapi import FastAPI
from titanic_service.api.routes import router as api_router
from titanic_service.config import LOG_LEVEL
from titanic_service.inference.session import PredictionSession
from titanic_service.metrics.prometheus import metrics_router
from titanic_service.middleware.timeout import TimeoutMiddleware
from titanic_service.model.loader import LoadError
from titanic_service.utils.logging import get_logger, setup_logging


def create_app() -> FastAPI:
    app = FastAPI(title="Titanic Survival Service", version="0.1.0")

    # API routes
    app.include_router(api_router)

    # Metrics endpoint
    app.include_router(metrics_router)

    app.add_middleware(TimeoutMiddleware)

    @app.on_event("startup")
    async def on_startup() -> None:
        setup_logging(LOG_LEVEL)
        session = PredictionSession()
        app.state.session = session
        try:
            await session.load()
        except LoadError:
            # Stay up in load_failed; POST /model/reload retries
            get_logger().warning(
                "starting_without_model",
                extra={"model_location": session.location, "model_status": session.model_status.value},
            )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        session = getattr(app.state, "session", None)
        if session is not None:
            session.close()

    return app


app = create_app()
