"""Service broker FastAPI application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from userbroker import __version__
from userbroker.api.dependencies import close_controller, init_controller
from userbroker.api.v2 import (
    bindings_router,
    catalog_router,
    health_router,
    instances_router,
)
from userbroker.config import get_broker_config
from userbroker.core.errors import BrokerError
from userbroker.core.logging_schema import LogEvent
from userbroker.logging import setup_logging

_config = get_broker_config()
setup_logging(_config.logging)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(
        "Starting service broker",
        extra={"event": LogEvent.APP_STARTED, "version": __version__},
    )
    init_controller()
    yield
    logger.info("Shutting down service broker", extra={"event": LogEvent.APP_STOPPED})
    await close_controller()


app = FastAPI(
    title="User Provided Service Broker",
    description="Service broker for user-provided and pod-backed services",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(BrokerError)
async def broker_error_handler(request: Request, exc: BrokerError) -> JSONResponse:
    """Handle BrokerError exceptions."""
    logger.warning(
        "Broker error",
        extra={
            "event": LogEvent.BROKER_ERROR,
            "error_code": exc.code.value,
            "error_message": exc.message,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with logging."""
    logger.exception(
        "Unhandled exception",
        extra={
            "event": LogEvent.UNHANDLED_EXCEPTION,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# /health and /debug without prefix
app.include_router(health_router)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


app.include_router(catalog_router, prefix="/v2")
app.include_router(instances_router, prefix="/v2")
app.include_router(bindings_router, prefix="/v2")


def main() -> None:
    """Run the broker server."""
    config = get_broker_config()
    uvicorn.run(
        "userbroker.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
