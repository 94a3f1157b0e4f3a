"""Function router: one POST endpoint per scan/refresh/verify function.

Each handler runs the same guard chain before dispatching to its pipeline:
  auth (verify-builder only) → rate limit → input schema → required secrets
Unhandled pipeline errors become a 500 JSON body; soft failures are handled
inside the pipelines.
"""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mothership.auth import get_current_user_id, get_optional_user_id
from mothership.config import settings
from mothership.database import get_session_factory
from mothership.exceptions import ConfigurationError
from mothership.orchestrator.schemas import (
    RedditSearchInput,
    RefreshInput,
    TikTokSearchInput,
    VerifyBuilderInput,
)
from mothership.pipelines.reddit import RedditPipeline
from mothership.pipelines.refresh import RefreshJob
from mothership.pipelines.tiktok import TikTokPipeline
from mothership.pipelines.verification import BuilderVerifier
from mothership.services.rate_limiter import (
    RATE_LIMIT_PRESETS,
    RateLimiter,
    RateLimitPreset,
    RateLimitStore,
    with_rate_limit,
)
from mothership.services.search_cache import SearchCacheService
from mothership.services.store import ChannelScanStore, ProblemStore, VerificationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])

SessionFactory = async_sessionmaker[AsyncSession]


# ═══════════════ DEPENDENCIES ═══════════════

def get_rate_limiter(factory: SessionFactory = Depends(get_session_factory)) -> RateLimiter:
    return RateLimiter(RateLimitStore(factory))


def get_tiktok_pipeline(factory: SessionFactory = Depends(get_session_factory)) -> TikTokPipeline:
    return TikTokPipeline(SearchCacheService(factory), ProblemStore(factory), ChannelScanStore(factory))


def get_reddit_pipeline(factory: SessionFactory = Depends(get_session_factory)) -> RedditPipeline:
    return RedditPipeline(ProblemStore(factory), ChannelScanStore(factory))


def get_refresh_job(factory: SessionFactory = Depends(get_session_factory)) -> RefreshJob:
    return RefreshJob(ProblemStore(factory))


def get_builder_verifier(factory: SessionFactory = Depends(get_session_factory)) -> BuilderVerifier:
    return BuilderVerifier(VerificationStore(factory))


# ═══════════════ HELPERS ═══════════════

async def _read_json(request: Request) -> Any:
    """Request body as JSON; an empty or non-JSON body reads as {}."""
    try:
        return await request.json()
    except ValueError:
        return {}


def validation_error_response(exc: ValidationError) -> JSONResponse:
    details = [
        {
            "path": ".".join(str(part) for part in err["loc"]) or "body",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "message": "; ".join(f"{d['path']}: {d['message']}" for d in details),
            "details": details,
        },
    )


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": message})


def _parse(model: type[BaseModel], body: Any) -> BaseModel | JSONResponse:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        return validation_error_response(e)


def _missing_secrets(*names: str) -> JSONResponse | None:
    missing = settings.missing(*names)
    if not missing:
        return None
    error = ConfigurationError(missing)
    logger.error("Config | %s", error)
    return _server_error(str(error))


# ═══════════════ ENDPOINTS ═══════════════

@router.post("/search-tiktok")
async def search_tiktok(
    request: Request,
    user_id: str | None = Depends(get_optional_user_id),
    limiter: RateLimiter = Depends(get_rate_limiter),
    pipeline: TikTokPipeline = Depends(get_tiktok_pipeline),
):
    blocked = await with_rate_limit(
        limiter, request, "search-tiktok", RATE_LIMIT_PRESETS[RateLimitPreset.SEARCH], user_id,
    )
    if blocked:
        return blocked

    inp = _parse(TikTokSearchInput, await _read_json(request))
    if isinstance(inp, JSONResponse):
        return inp

    missing = _missing_secrets("apify_api_token", "anthropic_api_key")
    if missing:
        return missing

    start = time.monotonic()
    try:
        result = await pipeline.execute(inp.niche, inp.force_refresh)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error("search-tiktok failed | niche=%s | %dms | %s", inp.niche.value, elapsed_ms, str(e)[:300])
        return _server_error(str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("search-tiktok | niche=%s | source=%s | %dms", inp.niche.value, result.get("source"), elapsed_ms)
    return JSONResponse(content=result)


@router.post("/search-reddit")
async def search_reddit(
    request: Request,
    user_id: str | None = Depends(get_optional_user_id),
    limiter: RateLimiter = Depends(get_rate_limiter),
    pipeline: RedditPipeline = Depends(get_reddit_pipeline),
):
    blocked = await with_rate_limit(
        limiter, request, "search-reddit", RATE_LIMIT_PRESETS[RateLimitPreset.SEARCH], user_id,
    )
    if blocked:
        return blocked

    inp = _parse(RedditSearchInput, await _read_json(request))
    if isinstance(inp, JSONResponse):
        return inp

    missing = _missing_secrets("reddit_rapidapi_key")
    if missing:
        return missing

    start = time.monotonic()
    try:
        result = await pipeline.execute(inp.subreddit_id)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error("search-reddit failed | r/%s | %dms | %s", inp.subreddit_id.value, elapsed_ms, str(e)[:300])
        return _server_error(str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("search-reddit | r/%s | problems=%d | %dms", inp.subreddit_id.value, len(result["data"]), elapsed_ms)
    return JSONResponse(content=result)


@router.post("/refresh-problem-data")
async def refresh_problem_data(
    request: Request,
    user_id: str | None = Depends(get_optional_user_id),
    limiter: RateLimiter = Depends(get_rate_limiter),
    job: RefreshJob = Depends(get_refresh_job),
):
    blocked = await with_rate_limit(
        limiter, request, "refresh-problem-data", RATE_LIMIT_PRESETS[RateLimitPreset.STRICT], user_id,
    )
    if blocked:
        return blocked

    body = await _read_json(request)
    inp = _parse(RefreshInput, body if isinstance(body, dict) else {})
    if isinstance(inp, JSONResponse):
        return inp

    start = time.monotonic()
    try:
        result = await job.execute(inp.problem_id)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error("refresh-problem-data failed | %dms | %s", elapsed_ms, str(e)[:300])
        return _server_error(str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("refresh-problem-data | updated=%d | %dms", result["updated"], elapsed_ms)
    return JSONResponse(content=result)


@router.post("/verify-builder")
async def verify_builder(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    limiter: RateLimiter = Depends(get_rate_limiter),
    verifier: BuilderVerifier = Depends(get_builder_verifier),
):
    blocked = await with_rate_limit(
        limiter, request, "verify-builder", RATE_LIMIT_PRESETS[RateLimitPreset.SENSITIVE], user_id,
    )
    if blocked:
        return blocked

    inp = _parse(VerifyBuilderInput, await _read_json(request))
    if isinstance(inp, JSONResponse):
        return inp

    try:
        result = await verifier.execute(user_id, inp)
    except Exception as e:
        logger.error("verify-builder failed | user=%s | %s", user_id, str(e)[:300])
        return JSONResponse(status_code=500, content={"error": str(e)})

    return JSONResponse(content=result.to_wire())
