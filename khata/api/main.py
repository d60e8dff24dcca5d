"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from khata.api.middleware import RequestIDMiddleware, MetricsMiddleware
from khata.api.v1 import (
    access,
    changes,
    customers,
    dashboard,
    notifications,
    preferences,
    products,
    reports,
    statements,
    transactions,
)
from khata.infrastructure.database.session import init_db
from khata.infrastructure.observability.logging import setup_logging
from khata.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Khata Ledger",
        description="Customer ledger, statements and shop reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
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
    app.include_router(customers.router, prefix="/v1", tags=["customers"])
    app.include_router(statements.router, prefix="/v1", tags=["statements"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(products.router, prefix="/v1", tags=["products"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])
    app.include_router(access.router, prefix="/v1", tags=["access"])
    app.include_router(preferences.router, prefix="/v1", tags=["preferences"])
    app.include_router(changes.router, prefix="/v1", tags=["changes"])

    return app


app = create_app()
