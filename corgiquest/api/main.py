"""
corgiquest.api.main — FastAPI application entry point
======================================================

Run with::

    uvicorn corgiquest.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from corgiquest.api.deps import get_engine  # noqa: E402
from corgiquest.api.routes.admin import router as admin_router  # noqa: E402
from corgiquest.api.routes.dogs import router as dogs_router  # noqa: E402
from corgiquest.api.routes.households import router as households_router  # noqa: E402
from corgiquest.api.routes.items import router as items_router  # noqa: E402
from corgiquest.api.routes.payments import router as payments_router  # noqa: E402
from corgiquest.api.routes.presence import router as presence_router  # noqa: E402
from corgiquest.api.routes.recommendations import router as recommendations_router  # noqa: E402
from corgiquest.api.routes.tips import router as tips_router  # noqa: E402
from corgiquest.api.routes.waitlist import router as waitlist_router  # noqa: E402
from corgiquest.database.engine import init_db  # noqa: E402
from corgiquest.errors import (  # noqa: E402
    InvalidEmailError,
    NotFoundError,
    UpstreamServiceError,
)
from corgiquest.monitoring import init_sentry  # noqa: E402

logger = logging.getLogger(__name__)

init_sentry()


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine and the item catalogue."""
    engine = get_engine()
    init_db(engine)
    logger.info("Corgi Quest API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Corgi Quest API shutting down")


app = FastAPI(
    title="Corgi Quest API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
@app.exception_handler(InvalidEmailError)
async def _invalid_email(request: Request, exc: InvalidEmailError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(ValueError)
async def _bad_value(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(UpstreamServiceError)
async def _upstream(request: Request, exc: UpstreamServiceError):
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


# Mount routers; households first so /dogs/first wins over /dogs/{dog_id}
app.include_router(households_router, prefix="/api")
app.include_router(dogs_router, prefix="/api")
app.include_router(recommendations_router, prefix="/api")
app.include_router(items_router, prefix="/api")
app.include_router(presence_router, prefix="/api")
app.include_router(waitlist_router, prefix="/api")
app.include_router(tips_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
