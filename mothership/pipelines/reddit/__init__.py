"""Pipeline R: subreddit scan.

Flow: posts → comments (first 5 posts) → LLM analysis or deterministic
fallback → totals → upsert every problem → channel scan.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping

from mothership.integrations.reddit import RedditClient, RedditPost
from mothership.orchestrator.schemas import AnalyzedProblem, HiddenInsight, RedditResult
from mothership.pipelines.reddit.analyzer import PostAnalysis, analyze_posts
from mothership.pipelines.reddit.fallback import fallback_problems
from mothership.services.store import ChannelScanStore, ProblemStore
from mothership.utils.formatting import format_count, round_half_up
from mothership.utils.niche_data import SUBREDDITS, Subreddit

logger = logging.getLogger(__name__)

COMMENT_POSTS = 5
VIRAL_TOTAL_SCORE = 5000
LIBRARY_SLOTS = 20

Analyzer = Callable[[list[RedditPost], Mapping[str, list[str]], str], Awaitable[PostAnalysis]]


class RedditPipeline:
    """Orchestrates one subreddit scan."""

    def __init__(
        self,
        problems: ProblemStore,
        scans: ChannelScanStore,
        client: RedditClient | None = None,
        analyzer: Analyzer = analyze_posts,
    ):
        self.problems = problems
        self.scans = scans
        self.client = client or RedditClient()
        self.analyzer = analyzer

    async def execute(self, subreddit: Subreddit) -> dict[str, Any]:
        info = SUBREDDITS[subreddit]
        logger.info("Pipeline R | %s", info["name"])

        posts = await self.client.fetch_posts(subreddit.value)
        if not posts:
            return {"success": True, "data": [], "message": "No posts found", "subreddit": info["name"]}

        comments: dict[str, list[str]] = {}
        for post in posts[:COMMENT_POSTS]:
            if post.permalink:
                comments[post.permalink] = await self.client.fetch_comments(post)

        analysis = await self.analyzer(posts, comments, info["name"])
        if not analysis.is_fallback and not analysis.problems:
            analysis = PostAnalysis(kind="fallback", reason="AI returned no problems")
        if analysis.is_fallback:
            logger.warning("Pipeline R | AI unavailable, using top posts | %s", analysis.reason)
            problems = fallback_problems(posts, comments, info["name"], info["category"])
        else:
            problems = analysis.problems

        scanned_at = datetime.now(timezone.utc)
        results = self.build_results(subreddit, posts, problems, scanned_at)

        for result in results:
            try:
                await self.problems.upsert_by_title(self._problem_row(result, scanned_at))
            except Exception as e:
                logger.error("Pipeline R | problem upsert failed | title=%s | %s", result.title[:80], str(e)[:200])

        try:
            await self.scans.record_scan(
                f"reddit-{subreddit.value}", info["name"], len(posts), len(results), scanned_at,
            )
        except Exception as e:
            logger.error("Pipeline R | channel scan write failed | %s", str(e)[:200])

        logger.info("Pipeline R done | %s | posts=%d | problems=%d", info["name"], len(posts), len(results))
        return {
            "success": True,
            "data": [r.to_wire() for r in results],
            "postsAnalyzed": len(posts),
            "subreddit": info["name"],
            "analysis": analysis.kind,
            "lastScannedAt": scanned_at.isoformat(),
        }

    @staticmethod
    def build_results(
        subreddit: Subreddit,
        posts: list[RedditPost],
        problems: list[AnalyzedProblem],
        scanned_at: datetime,
    ) -> list[RedditResult]:
        info = SUBREDDITS[subreddit]
        total_score = sum(p.score for p in posts)
        total_comments = sum(p.num_comments for p in posts)
        stamp = int(scanned_at.timestamp() * 1000)

        return [
            RedditResult(
                id=f"reddit-{subreddit.value}-{stamp}-{index}",
                title=problem.title,
                description=problem.description,
                opportunity_score=problem.opportunity_score,
                sentiment=problem.sentiment,
                category=problem.category or info["category"],
                sources=[{
                    "name": "reddit",
                    "sentiment": problem.sentiment,
                    "mentions": total_comments,
                    "trend": f"{format_count(total_score)} upvotes",
                }],
                hidden_insight=HiddenInsight(
                    surface_ask=problem.surface_ask,
                    real_problem=problem.real_problem,
                    hidden_signal=problem.hidden_signal,
                ),
                pain_points=problem.pain_points,
                subreddit_source=info["name"],
                total_score=total_score,
                total_comments=total_comments,
                is_viral=total_score > VIRAL_TOTAL_SCORE,
            )
            for index, problem in enumerate(problems)
        ]

    @staticmethod
    def _problem_row(result: RedditResult, scanned_at: datetime) -> dict[str, Any]:
        return {
            "title": result.title,
            "subtitle": result.description,
            "opportunity_score": round_half_up(result.opportunity_score),
            "sentiment": result.sentiment,
            "category": result.category,
            "niche": result.category.lower().replace(" ", "-"),
            "sources": result.sources,
            "hidden_insight": result.hidden_insight.to_wire(),
            "pain_points": result.pain_points,
            "is_viral": result.is_viral,
            "slots_total": LIBRARY_SLOTS,
            "slots_filled": 0,
            "views": result.total_score,
            "discovered_at": scanned_at,
        }
