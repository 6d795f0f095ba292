"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from loanbook.api.middleware import MetricsMiddleware, RequestIDMiddleware
from loanbook.api.v1 import allocation
from loanbook.config import settings
from loanbook.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level, service=settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Book Balancer",
        description="Assigns loans to bank debt facilities under covenants and reports expected yield",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(allocation.router, prefix="/v1", tags=["allocations"])

    return app


app = create_app()
