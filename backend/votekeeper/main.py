"""
Votekeeper FastAPI Application - Main entry point.

Votekeeper runs one ballot session at a time with:

- Simple, weighted, delegated and ranked formats
- Vote delegation with reversible weight
- Quorum-gated multi-round sessions
- Per-vote fees collected into escrow
- One-shot finalization that freezes the winner

Endpoints live under /api/v1/voting/*.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from votekeeper.core.config import settings
from votekeeper.core.exceptions import VotingError
from votekeeper.db.base import init_db, async_session_maker
from votekeeper.schemas.common import HealthResponse
from votekeeper.api.v1.voting import voting_router
from votekeeper.services.sessions import ensure_core_state

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    async with async_session_maker() as db:
        await ensure_core_state(db, settings.ADMIN_ADDRESS)
        await db.commit()
    logger.info(f"{settings.APP_NAME} started (admin={settings.ADMIN_ADDRESS})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Multi-round ballot sessions with delegation, quorum gating and one-shot finalization.",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Voting module - /api/v1/voting/*
app.include_router(
    voting_router,
    prefix=settings.API_V1_PREFIX,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(VotingError)
async def voting_error_handler(request: Request, exc: VotingError):
    """Render voting core failures with their kind."""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "votekeeper.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
