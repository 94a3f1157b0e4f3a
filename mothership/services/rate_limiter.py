"""Sliding-window rate limiting backed by the `rate_limits` table.

The counting itself is an atomic check-and-increment inside one database
transaction; this module only parameterizes it, derives identifiers and shapes
the 429 response. A failing store never blocks traffic (fail open).
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mothership.models.rate_limit import RateLimitCounter
from mothership.services.store import dialect_insert

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60


@dataclass(frozen=True)
class RateLimitOptions:
    max_requests: int = 60
    window_minutes: float = 1


class RateLimitPreset(str, Enum):
    STANDARD = "standard"
    SENSITIVE = "sensitive"
    SEARCH = "search"
    PUBLIC = "public"
    STRICT = "strict"


RATE_LIMIT_PRESETS: Mapping[RateLimitPreset, RateLimitOptions] = MappingProxyType({
    RateLimitPreset.STANDARD: RateLimitOptions(max_requests=60, window_minutes=1),
    RateLimitPreset.SENSITIVE: RateLimitOptions(max_requests=10, window_minutes=0.5),
    RateLimitPreset.SEARCH: RateLimitOptions(max_requests=20, window_minutes=1),
    RateLimitPreset.PUBLIC: RateLimitOptions(max_requests=30, window_minutes=1),
    RateLimitPreset.STRICT: RateLimitOptions(max_requests=5, window_minutes=1),
})


class RateLimitResult(BaseModel):
    allowed: bool
    current: int
    limit: int
    remaining: int | None = None
    retry_after: int | None = None


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RateLimitStore:
    """Atomic check-and-increment over `rate_limits`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def check_and_increment(
        self,
        identifier: str,
        endpoint: str,
        max_requests: int,
        window_minutes: float,
    ) -> RateLimitResult:
        now = datetime.now(timezone.utc)
        window = timedelta(minutes=window_minutes)

        async with self._session_factory() as session, session.begin():
            insert = dialect_insert(session)
            await session.execute(
                insert(RateLimitCounter)
                .values(identifier=identifier, endpoint=endpoint, request_count=0, window_start=now)
                .on_conflict_do_nothing(index_elements=["identifier", "endpoint"])
            )
            counter = (await session.execute(
                select(RateLimitCounter)
                .where(RateLimitCounter.identifier == identifier, RateLimitCounter.endpoint == endpoint)
                .with_for_update()
            )).scalar_one()

            window_start = _as_utc(counter.window_start)
            if now - window_start >= window:
                counter.window_start = now
                counter.request_count = 0
                window_start = now

            if counter.request_count >= max_requests:
                retry_after = max(1, math.ceil((window_start + window - now).total_seconds()))
                return RateLimitResult(
                    allowed=False,
                    current=counter.request_count,
                    limit=max_requests,
                    remaining=0,
                    retry_after=retry_after,
                )

            counter.request_count += 1
            return RateLimitResult(
                allowed=True,
                current=counter.request_count,
                limit=max_requests,
                remaining=max_requests - counter.request_count,
            )


class RateLimiter:
    """Fail-open front for a RateLimitStore."""

    def __init__(self, store: RateLimitStore):
        self.store = store

    async def check(
        self,
        identifier: str,
        endpoint: str,
        options: RateLimitOptions = RateLimitOptions(),
    ) -> RateLimitResult:
        try:
            return await self.store.check_and_increment(
                identifier, endpoint, options.max_requests, options.window_minutes,
            )
        except Exception as e:
            logger.error("Rate limit check failed, allowing request | endpoint=%s | %s", endpoint, str(e)[:200])
            return RateLimitResult(
                allowed=True,
                current=0,
                limit=options.max_requests,
                remaining=options.max_requests,
            )


def get_identifier(headers: Mapping[str, str], user_id: str | None = None) -> str:
    """`user:<id>` when authenticated, else `ip:<client ip>` from proxy headers."""
    if user_id:
        return f"user:{user_id}"

    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = (
        forwarded
        or headers.get("x-real-ip")
        or headers.get("cf-connecting-ip")
        or "anonymous"
    )
    return f"ip:{ip}"


def rate_limit_response(result: RateLimitResult) -> JSONResponse:
    retry_after = result.retry_after or DEFAULT_RETRY_AFTER
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests",
            "message": "Rate limit exceeded. Please try again later.",
            "retry_after": retry_after,
        },
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": "0",
        },
    )


async def with_rate_limit(
    limiter: RateLimiter,
    request: Request,
    endpoint: str,
    options: RateLimitOptions = RateLimitOptions(),
    user_id: str | None = None,
) -> JSONResponse | None:
    """Return None when the request may proceed, else the 429 response."""
    identifier = get_identifier(request.headers, user_id)
    result = await limiter.check(identifier, endpoint, options)

    if not result.allowed:
        logger.info(
            "Rate limit blocked | %s | endpoint=%s | %d/%d",
            identifier, endpoint, result.current, result.limit,
        )
        return rate_limit_response(result)
    return None
