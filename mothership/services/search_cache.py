"""Per-niche search cache backed by the `search_cache` table.

Read-through only: a live row (expires_at in the future) short-circuits a
scan, anything else means the full pipeline runs. Writes replace every
existing row for the niche, so at most one live row exists per niche.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mothership.config import settings
from mothership.models.search_cache import SearchCache

logger = logging.getLogger(__name__)


@dataclass
class CachedSearch:
    niche: str
    results: list[dict[str, Any]]
    videos_analyzed: int
    queries_used: list[str]
    created_at: datetime
    expires_at: datetime


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SearchCacheService:
    """Async cache of niche scan results with a fixed TTL."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl_seconds: int | None = None,
    ):
        self._session_factory = session_factory
        self.ttl_seconds = ttl_seconds or settings.search_cache_ttl_seconds

    async def get(self, niche: str, now: datetime | None = None) -> CachedSearch | None:
        """Return the live entry for `niche`, or None on miss/expiry."""
        now = now or datetime.now(timezone.utc)
        async with self._session_factory() as session:
            row = (await session.execute(
                select(SearchCache)
                .where(SearchCache.niche == niche, SearchCache.expires_at > now)
                .order_by(SearchCache.created_at.desc())
                .limit(1)
            )).scalar_one_or_none()

        if row is None:
            logger.info("Cache MISS | niche=%s", niche)
            return None

        logger.info("Cache HIT | niche=%s | results=%d", niche, len(row.results))
        return CachedSearch(
            niche=row.niche,
            results=list(row.results),
            videos_analyzed=row.videos_analyzed,
            queries_used=list(row.queries_used),
            created_at=_as_utc(row.created_at),
            expires_at=_as_utc(row.expires_at),
        )

    async def set(
        self,
        niche: str,
        results: list[dict[str, Any]],
        videos_analyzed: int,
        queries_used: list[str],
        now: datetime | None = None,
    ) -> CachedSearch:
        """Replace the niche's cache entry."""
        now = now or datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=self.ttl_seconds)

        async with self._session_factory() as session, session.begin():
            await session.execute(delete(SearchCache).where(SearchCache.niche == niche))
            session.add(SearchCache(
                niche=niche,
                results=results,
                videos_analyzed=videos_analyzed,
                queries_used=queries_used,
                expires_at=expires_at,
                created_at=now,
            ))

        logger.info("Cache SET | niche=%s | results=%d | ttl=%ds", niche, len(results), self.ttl_seconds)
        return CachedSearch(
            niche=niche,
            results=results,
            videos_analyzed=videos_analyzed,
            queries_used=queries_used,
            created_at=now,
            expires_at=expires_at,
        )

    async def invalidate(self, niche: str) -> int:
        """Drop every entry for `niche`; returns the number removed."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(delete(SearchCache).where(SearchCache.niche == niche))
        logger.info("Cache invalidated | niche=%s | rows=%d", niche, result.rowcount)
        return result.rowcount
