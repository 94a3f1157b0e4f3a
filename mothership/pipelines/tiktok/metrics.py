"""Scan-level scoring: opportunity score, engagement allocation, virality."""

from dataclasses import dataclass

from mothership.integrations.apify import TikTokVideo
from mothership.utils.formatting import round_half_up

VIRAL_MIN_VIEWS = 100_000
VIRAL_MIN_ENGAGEMENT_RATE = 3.0


@dataclass(frozen=True)
class Engagement:
    views: int = 0
    shares: int = 0
    saves: int = 0

    @property
    def rate(self) -> float:
        """(shares + saves) / views, as a percentage."""
        if self.views <= 0:
            return 0.0
        return (self.shares + self.saves) / self.views * 100


def opportunity_score(demand_velocity: float, competition_gap: float) -> int:
    return round_half_up(demand_velocity * 0.6 + competition_gap * 0.4)


def total_engagement(videos: list[TikTokVideo]) -> Engagement:
    return Engagement(
        views=sum(v.views for v in videos),
        shares=sum(v.shares for v in videos),
        saves=sum(v.saves for v in videos),
    )


def allocate(total: Engagement, problem_count: int) -> Engagement:
    """Even per-problem share of the scan totals."""
    if problem_count <= 0:
        return Engagement()
    return Engagement(
        views=round_half_up(total.views / problem_count),
        shares=round_half_up(total.shares / problem_count),
        saves=round_half_up(total.saves / problem_count),
    )


def is_viral(allocated: Engagement, total: Engagement) -> bool:
    return allocated.views >= VIRAL_MIN_VIEWS and total.rate >= VIRAL_MIN_ENGAGEMENT_RATE
