"""Mothership Backend — FastAPI application entry point.

Serves the signal-ingestion, refresh and verification functions under
/functions/v1/<name>.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mothership.auth import Unauthorized
from mothership.config import settings
from mothership.orchestrator.router import router as functions_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("mothership")


# ═══════════════ LIFESPAN ═══════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Mothership backend starting | model=%s", settings.claude_model)

    # Initialize database (graceful degradation if unavailable)
    from mothership.database import close_db, init_db
    db_ok = await init_db()
    logger.info("Database: %s", "connected" if db_ok else "unavailable (continuing without)")

    yield

    await close_db()
    logger.info("Mothership backend shutting down")


# ═══════════════ APP ═══════════════

app = FastAPI(
    title="Mothership API",
    description="Market signal ingestion, problem refresh and builder verification",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(functions_router)


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    logger.info("Unauthorized | path=%s | %s", request.url.path, exc)
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


# ═══════════════ ENDPOINTS ═══════════════

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "has_anthropic": settings.has_anthropic_key,
        "has_apify": bool(settings.apify_api_token),
        "has_reddit": bool(settings.reddit_rapidapi_key),
    }
