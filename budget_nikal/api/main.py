"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from budget_nikal.api.middleware import RequestIDMiddleware, MetricsMiddleware
from budget_nikal.api.v1 import budgets, cards, cash_out, items
from budget_nikal.infrastructure.observability.logging import setup_logging
from budget_nikal.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Budget Nikal",
        description="Monthly budgeting with credit card statements and cash-out planning",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(items.router, prefix="/v1", tags=["items"])
    app.include_router(cash_out.router, prefix="/v1", tags=["cash-out"])
    app.include_router(cards.router, prefix="/v1", tags=["cards"])

    return app


app = create_app()
