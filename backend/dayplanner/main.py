"""Main FastAPI application for the day planner backend."""
from fastapi import FastAPI, Request

from dayplanner.api.routes.schedules import router as schedules_router
from dayplanner.core.config import settings
from dayplanner.core.logging import configure_logging
from dayplanner.core.middleware import RequestIDMiddleware
from dayplanner.db.base import Base
from dayplanner.db.session import engine
from dayplanner.observability.client import init_opik
from dayplanner.observability.tracing import trace

configure_logging(log_level=settings.log_level, debug=settings.debug)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(schedules_router)


@app.on_event("startup")
async def startup() -> None:
    """Initialize observability and, for local runs, the schema."""
    init_opik()
    if settings.auto_create_tables:
        import dayplanner.db.models  # noqa: F401  ensure models are registered

        Base.metadata.create_all(bind=engine)


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
