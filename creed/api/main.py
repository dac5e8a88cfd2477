"""
creed.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn creed.api.main:app --reload --port 8000
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

from creed.api.auth import router as auth_router  # noqa: E402
from creed.api.deps import get_engine, get_settings_cache  # noqa: E402
from creed.api.routes.members import router as members_router  # noqa: E402
from creed.api.routes.polls import router as polls_router  # noqa: E402
from creed.api.routes.public import router as public_router  # noqa: E402
from creed.api.routes.rides import router as rides_router  # noqa: E402
from creed.api.routes.settings import router as settings_router  # noqa: E402
from creed.database.engine import init_db  # noqa: E402
from creed.engine.drafts import DraftError  # noqa: E402
from creed.errors import AuthFailure, FetchFailure, WriteFailure  # noqa: E402
from creed.services.log_buffer import install_handler  # noqa: E402

logger = logging.getLogger(__name__)


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
    """Startup/shutdown lifecycle: schema check, settings snapshot."""
    # Uvicorn reconfigures logging when it starts, so attach here rather
    # than at import time.
    install_handler()

    engine = get_engine()
    init_db(engine)
    get_settings_cache().load()
    logger.info("Creed API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Creed API shutting down")


app = FastAPI(
    title="Creed Club Dashboard API",
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
# Failure mapping
# ---------------------------------------------------------------------------
@app.exception_handler(AuthFailure)
async def _auth_failure(request: Request, exc: AuthFailure):
    return JSONResponse(status_code=401, content={"detail": f"Access denied: {exc}"})


@app.exception_handler(FetchFailure)
async def _fetch_failure(request: Request, exc: FetchFailure):
    return JSONResponse(
        status_code=503,
        content={"detail": "The club database is unavailable. Try again shortly."},
    )


@app.exception_handler(WriteFailure)
async def _write_failure(request: Request, exc: WriteFailure):
    return JSONResponse(
        status_code=409 if exc.conflict else 500,
        content={"detail": str(exc)},
    )


@app.exception_handler(DraftError)
async def _draft_error(request: Request, exc: DraftError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(public_router, prefix="/api")
app.include_router(members_router, prefix="/api")
app.include_router(rides_router, prefix="/api")
app.include_router(polls_router, prefix="/api")
app.include_router(settings_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
