"""
Module: main.py
Description: FastAPI application entry point for FormRelay.

Initializes the FastAPI application with routes and error handlers.
With RUN_WORKER_IN_PROCESS enabled, the application lifespan also runs
a delivery worker next to the API; otherwise the worker runs as its
own process (formrelay-worker).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from mangum import Mangum

from formrelay.backends import get_queue, get_status_store
from formrelay.config.settings import settings
from formrelay.delivery.sink import build_sink
from formrelay.delivery.worker import DeliveryWorker
from formrelay.handlers.submissions import router as submissions_router
from formrelay.utils.logger import get_logger
from formrelay.utils.metrics import MetricsClient

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start and stop the in-process delivery worker when enabled."""
    logger.info(
        "Starting FormRelay API",
        version=settings.app_version,
        stage=settings.stage,
        queue_backend=settings.queue_backend,
        worker_in_process=settings.run_worker_in_process
    )

    worker = None
    if settings.run_worker_in_process:
        # Sink errors propagate and abort startup
        sink = build_sink(settings)
        worker = DeliveryWorker.from_settings(
            settings,
            queue=get_queue(),
            sink=sink,
            status_store=get_status_store(),
            metrics_client=MetricsClient(enabled=settings.metrics_enabled)
        )
        await worker.start()

    try:
        yield
    finally:
        if worker is not None:
            await worker.stop()
            await worker.sink.close()
        logger.info("Shutting down FormRelay API")


app = FastAPI(
    title="FormRelay",
    description="Form submission intake with asynchronous delivery to a record sink",
    version=settings.app_version,
    lifespan=lifespan
)

app.include_router(submissions_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns basic application health information.
    """
    logger.debug("Health check requested")

    return {
        "status": "ok",
        "message": "FormRelay is healthy",
        "version": settings.app_version,
        "environment": settings.stage
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global HTTP exception handler.

    Logs HTTP exceptions and returns structured error responses.
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.status_code,
                "message": exc.detail,
                "type": "http_exception"
            }
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors.

    Logs unexpected exceptions and returns generic error responses.
    """
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": 500,
                "message": "Internal server error",
                "type": "internal_error"
            }
        }
    )


# Lambda handler for API-only deployments; the worker runs elsewhere
handler = Mangum(app, lifespan="off")
