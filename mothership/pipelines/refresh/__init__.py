"""Refresh job: recompute problem metrics and backfill AI content.

Flow per problem: metrics (jitter or derive) → sources (shape-preserving) →
hidden insight (only when missing) → solutions (only when no AI set exists) → update.
A failing problem is logged and skipped; the batch always completes.
"""

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any

from mothership.config import settings
from mothership.models import Problem
from mothership.pipelines.refresh.insight import generate_hidden_insight
from mothership.pipelines.refresh.metrics import (
    DEFAULT_VIEWS,
    refresh_competition_gap,
    refresh_demand_velocity,
)
from mothership.pipelines.refresh.solutions import build_solutions
from mothership.pipelines.refresh.sources import regenerate_sources
from mothership.services.store import ProblemStore

logger = logging.getLogger(__name__)


def _needs_insight(insight: Any) -> bool:
    return not isinstance(insight, dict) or not insight.get("surfaceAsk")


class RefreshJob:
    """Batch refresh over one problem or the whole table."""

    def __init__(
        self,
        problems: ProblemStore,
        rng=None,
        insight_generator=generate_hidden_insight,
        author_id: str | None = None,
    ):
        self.problems = problems
        self.rng = rng or random.Random()
        self.insight_generator = insight_generator
        self.author_id = author_id or settings.ai_author_id

    async def execute(self, problem_id: uuid.UUID | None = None) -> dict[str, Any]:
        rows = await self.problems.list_problems(problem_id)
        if not rows:
            logger.info("Refresh | no problems | problem_id=%s", problem_id)
            return {"success": True, "message": "No problems to update", "updated": 0}

        logger.info("Refresh | problems=%d", len(rows))
        updated = 0
        failed = 0
        for problem in rows:
            try:
                await self.refresh_problem(problem)
                updated += 1
            except Exception as e:
                failed += 1
                logger.error("Refresh | problem=%s failed | %s", problem.id, str(e)[:200])

        logger.info("Refresh done | updated=%d failed=%d", updated, failed)
        return {
            "success": True,
            "message": f"Updated {updated} problem(s)",
            "updated": updated,
            "failed": failed,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def refresh_problem(self, problem: Problem) -> dict[str, Any]:
        """Recompute and persist one problem; returns the written values."""
        views = problem.views or DEFAULT_VIEWS
        shares = problem.shares or 0
        opportunity = problem.opportunity_score or 0

        demand_velocity = refresh_demand_velocity(problem.demand_velocity, views, shares, opportunity, self.rng)
        competition_gap = refresh_competition_gap(problem.competition_gap, problem.sentiment, opportunity, self.rng)
        sources = regenerate_sources(
            problem.sources, views, demand_velocity, competition_gap, problem.sentiment, self.rng,
        )

        values: dict[str, Any] = {
            "demand_velocity": demand_velocity,
            "competition_gap": competition_gap,
            "sources": sources,
        }

        if _needs_insight(problem.hidden_insight):
            insight = await self.insight_generator(problem.title, problem.category, problem.pain_points or [])
            values["hidden_insight"] = insight.to_wire()
            logger.info("Refresh | insight backfilled | title=%s", problem.title[:80])

        if not await self.problems.has_ai_solutions(problem.id):
            solutions = build_solutions(problem.id, problem.category, opportunity, self.author_id, self.rng)
            await self.problems.add_solutions(solutions)
            logger.info("Refresh | solutions backfilled | title=%s | count=%d", problem.title[:80], len(solutions))

        await self.problems.update_problem(problem.id, values)
        logger.info(
            "Refresh | updated | title=%s | demand=%d gap=%d",
            problem.title[:80], demand_velocity, competition_gap,
        )
        return values
