"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fairshare_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fairshare_gateway.api.v1 import expenses, friends, reports
from fairshare_gateway.infrastructure.observability.logging import setup_logging
from fairshare_gateway.config import settings
from fairshare_gateway.domain.exceptions import NotAuthenticatedError

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FairShare Gateway",
        description="Spending reports and expense notifications service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
        return JSONResponse(status_code=401, content={"detail": "Not authenticated"})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(friends.router, prefix="/v1", tags=["friends"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])

    return app


app = create_app()
