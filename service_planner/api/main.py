"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from service_planner.api.dependencies import get_request_id
from service_planner.api.middleware import MetricsMiddleware, RequestIDMiddleware
from service_planner.api.v1 import capacity, costs, finance, services
from service_planner.config import settings
from service_planner.domain.exceptions import (
    DomainException,
    DuplicateMonthError,
    DuplicateServiceError,
    ItemNotFoundError,
    MonthNotFoundError,
    ServiceNotFoundError,
)
from service_planner.infrastructure.observability.logging import setup_logging
from service_planner.infrastructure.observability.metrics import domain_error_counter

# Setup structured logging
setup_logging(settings.log_level)

NOT_FOUND_ERRORS = (ServiceNotFoundError, ItemNotFoundError, MonthNotFoundError)
CONFLICT_ERRORS = (DuplicateMonthError, DuplicateServiceError)


def domain_error_status(exc: DomainException) -> int:
    """HTTP status for a domain failure"""
    if isinstance(exc, NOT_FOUND_ERRORS):
        return 404
    if isinstance(exc, CONFLICT_ERRORS):
        return 409
    return 422


async def handle_domain_exception(request: Request, exc: DomainException) -> JSONResponse:
    status = domain_error_status(exc)
    domain_error_counter.labels(error=type(exc).__name__).inc()
    logging.warning(
        f"Domain error: {exc}",
        extra={"request_id": get_request_id(request), "error": type(exc).__name__},
    )
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Service Planner",
        description="Service capacity planning and finance projections",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, handle_domain_exception)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(services.router, prefix="/v1", tags=["services"])
    app.include_router(costs.router, prefix="/v1", tags=["cost-of-service"])
    app.include_router(capacity.router, prefix="/v1", tags=["capacity"])
    app.include_router(finance.router, prefix="/v1", tags=["finance"])

    return app


app = create_app()
