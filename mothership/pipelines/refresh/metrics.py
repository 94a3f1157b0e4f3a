"""Demand velocity / competition gap recomputation.

Existing non-zero values drift inside a small band; missing ones are derived
from views, shares and the opportunity score. Both are clamped.
"""

import math

from mothership.utils.formatting import clamp, round_half_up

DEFAULT_VIEWS = 100_000

SENTIMENT_BONUS = {"exploding": 20, "rising": 10}


def refresh_demand_velocity(current: int | None, views: int, shares: int, opportunity: int, rng) -> int:
    if current:
        return int(clamp(round_half_up(current * (0.95 + rng.random() * 0.1)), 20, 200))

    view_score = math.log10(max(1, views)) * 10
    share_bonus = min(20, shares / 100)
    return int(clamp(
        round_half_up(40 + view_score + share_bonus + opportunity * 0.4 + rng.random() * 25),
        30, 200,
    ))


def refresh_competition_gap(current: int | None, sentiment: str | None, opportunity: int, rng) -> int:
    if current:
        return int(clamp(round_half_up(current * (0.97 + rng.random() * 0.06)), 30, 95))

    bonus = SENTIMENT_BONUS.get(sentiment or "", 0)
    return int(clamp(
        round_half_up(45 + bonus + opportunity * 0.3 + rng.random() * 15),
        40, 95,
    ))
