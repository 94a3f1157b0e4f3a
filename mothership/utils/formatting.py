"""Number helpers shared by the scoring code."""

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike banker's round()."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def format_count(n: float) -> str:
    """Compact counter with one decimal: 1.2M, 3.4K, 950."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1000:
        return f"{n / 1000:.1f}K"
    return str(int(n))


def format_views(n: float) -> str:
    """Compact view count: 1.2M, 340K, 950."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1000:
        return f"{n / 1000:.0f}K"
    return str(int(n))
