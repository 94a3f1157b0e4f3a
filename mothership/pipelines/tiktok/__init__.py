"""Pipeline T: TikTok niche scan.

Flow: cache check → Apify scrape (two sampled queries) → LLM extraction →
metrics → cache write → viral problems into the library → channel scan.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from mothership.integrations.apify import ApifyRunPoller, ApifyTikTokClient, TikTokVideo
from mothership.orchestrator.schemas import TikTokResult
from mothership.pipelines.refresh.sources import generate_standard_sources
from mothership.pipelines.tiktok.extractor import ProblemExtraction, extract_problems
from mothership.pipelines.tiktok.metrics import allocate, is_viral, opportunity_score, total_engagement
from mothership.services.search_cache import SearchCacheService
from mothership.services.store import ChannelScanStore, ProblemStore
from mothership.utils.niche_data import NICHE_QUERIES, Niche, niche_label, niche_slug_to_name

logger = logging.getLogger(__name__)

QUERIES_PER_SCAN = 2
LIBRARY_SLOTS = 100

VideoFetcher = Callable[[list[str]], Awaitable[list[TikTokVideo]]]
Extractor = Callable[[list[TikTokVideo], Niche], Awaitable[ProblemExtraction]]


async def scrape_with_apify(queries: list[str]) -> list[TikTokVideo]:
    return await ApifyRunPoller(ApifyTikTokClient()).run_to_completion(queries)


class TikTokPipeline:
    """Orchestrates one niche scan."""

    def __init__(
        self,
        cache: SearchCacheService,
        problems: ProblemStore,
        scans: ChannelScanStore,
        fetch_videos: VideoFetcher = scrape_with_apify,
        extractor: Extractor = extract_problems,
        rng=None,
    ):
        self.cache = cache
        self.problems = problems
        self.scans = scans
        self.fetch_videos = fetch_videos
        self.extractor = extractor
        self.rng = rng or random.Random()

    async def execute(self, niche: Niche, force_refresh: bool = False) -> dict[str, Any]:
        logger.info("Pipeline T | niche=%s | force_refresh=%s", niche.value, force_refresh)

        if not force_refresh:
            cached = await self.cache.get(niche.value)
            if cached is not None:
                return {
                    "success": True,
                    "data": cached.results,
                    "videosAnalyzed": cached.videos_analyzed,
                    "queriesUsed": cached.queries_used,
                    "niche": niche.value,
                    "source": "cache",
                    "cachedAt": cached.created_at.isoformat(),
                    "expiresAt": cached.expires_at.isoformat(),
                }

        queries = self.rng.sample(list(NICHE_QUERIES[niche]), QUERIES_PER_SCAN)
        videos = await self.fetch_videos(queries)
        if not videos:
            logger.warning("Pipeline T | no videos | niche=%s", niche.value)
            return {
                "success": True,
                "data": [],
                "message": "No videos found",
                "videosAnalyzed": 0,
                "queriesUsed": queries,
                "niche": niche.value,
                "source": "live",
            }

        extraction = await self.extractor(videos, niche)
        if extraction.is_fallback or not extraction.problems:
            logger.warning(
                "Pipeline T | no AI problems | niche=%s | %s", niche.value, extraction.reason or "empty result",
            )
            return {
                "success": True,
                "data": [],
                "message": "AI analysis unavailable, no problems extracted. Try again shortly.",
                "videosAnalyzed": len(videos),
                "viralCount": 0,
                "queriesUsed": queries,
                "niche": niche.value,
                "source": "live",
                "analysis": "fallback",
            }

        scanned_at = datetime.now(timezone.utc)
        results = self.build_results(niche, videos, extraction, scanned_at)
        data = [r.to_wire() for r in results]

        try:
            await self.cache.set(niche.value, data, len(videos), queries, now=scanned_at)
        except Exception as e:
            logger.error("Pipeline T | cache write failed | %s", str(e)[:200])

        viral = [r for r in results if r.is_viral]
        for result in viral:
            try:
                await self.problems.insert_if_absent(self._problem_row(niche, result, scanned_at))
            except Exception as e:
                logger.error("Pipeline T | problem insert failed | title=%s | %s", result.title[:80], str(e)[:200])

        try:
            await self.scans.record_scan(
                f"tiktok-{niche.value}", niche_label(niche), len(videos), len(results), scanned_at,
            )
        except Exception as e:
            logger.error("Pipeline T | channel scan write failed | %s", str(e)[:200])

        logger.info(
            "Pipeline T done | niche=%s | videos=%d | problems=%d | viral=%d",
            niche.value, len(videos), len(results), len(viral),
        )
        return {
            "success": True,
            "data": data,
            "videosAnalyzed": len(videos),
            "viralCount": len(viral),
            "queriesUsed": queries,
            "niche": niche.value,
            "source": "live",
            "analysis": "ai",
            "lastScannedAt": scanned_at.isoformat(),
        }

    def build_results(
        self,
        niche: Niche,
        videos: list[TikTokVideo],
        extraction: ProblemExtraction,
        scanned_at: datetime,
    ) -> list[TikTokResult]:
        totals = total_engagement(videos)
        share = allocate(totals, len(extraction.problems))
        viral = is_viral(share, totals)
        stamp = int(scanned_at.timestamp() * 1000)

        results = []
        for index, problem in enumerate(extraction.problems):
            results.append(TikTokResult(
                id=f"tiktok-{niche.value}-{stamp}-{index}",
                title=problem.title,
                subtitle=problem.subtitle,
                category=niche_label(niche),
                sentiment=problem.sentiment,
                views=share.views,
                saves=share.saves,
                shares=share.shares,
                pain_points=problem.pain_points,
                rank=index + 1,
                is_viral=viral,
                added_to_library=viral,
                opportunity_score=opportunity_score(problem.demand_velocity, problem.competition_gap),
                demand_velocity=problem.demand_velocity,
                competition_gap=problem.competition_gap,
                hidden_insight=problem.hidden_insight,
                sources=generate_standard_sources(
                    share.views, problem.demand_velocity, problem.competition_gap, self.rng,
                ),
            ))
        return results

    @staticmethod
    def _problem_row(niche: Niche, result: TikTokResult, scanned_at: datetime) -> dict[str, Any]:
        return {
            "title": result.title,
            "subtitle": result.subtitle,
            "category": result.category,
            "niche": niche_slug_to_name(niche),
            "sentiment": result.sentiment,
            "opportunity_score": result.opportunity_score,
            "demand_velocity": result.demand_velocity,
            "competition_gap": result.competition_gap,
            "views": result.views,
            "saves": result.saves,
            "shares": result.shares,
            "is_viral": True,
            "pain_points": result.pain_points,
            "hidden_insight": result.hidden_insight.to_wire(),
            "sources": result.sources,
            "trending_rank": result.rank,
            "slots_total": LIBRARY_SLOTS,
            "slots_filled": 0,
            "discovered_at": scanned_at,
        }
