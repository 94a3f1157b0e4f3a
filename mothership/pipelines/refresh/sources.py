"""Per-problem trend signals (`problems.sources`).

Two shapes live in the table:
  standard  -> [{source, metric, value, change, icon}] for tiktok, google_trends, reddit
  reddit    -> a single reddit entry, marked either by `name: "reddit"`
               ({name, sentiment, mentions, trend}) or by `source: "reddit"`
Regeneration keeps whichever shape and marker key the problem already has.
"""

from typing import Any

from mothership.utils.formatting import clamp, format_count, format_views, round_half_up


def generate_standard_sources(views: int, demand_velocity: int, competition_gap: int, rng) -> list[dict[str, Any]]:
    view_var = round_half_up(views * (0.95 + rng.random() * 0.1))
    demand_var = round_half_up(demand_velocity + (rng.random() * 10 - 5))
    gap_var = round_half_up(competition_gap + (rng.random() * 8 - 4))

    return [
        {
            "source": "tiktok",
            "metric": "Views",
            "value": format_views(view_var),
            "change": round_half_up(demand_var * 0.8 + rng.random() * 15),
            "icon": "📱",
        },
        {
            "source": "google_trends",
            "metric": "Search Interest",
            "value": f"{int(clamp(demand_var, 20, 99))}/100",
            "change": round_half_up(demand_var * 0.5 + rng.random() * 10),
            "icon": "📈",
        },
        {
            "source": "reddit",
            "metric": "Mentions",
            "value": f"{round_half_up(view_var / 200)}+",
            "change": round_half_up(gap_var * 0.6 + rng.random() * 8),
            "icon": "💬",
        },
    ]


def is_reddit_only(sources: Any) -> bool:
    """True when any entry has `name == "reddit"` or the sole entry's `source` is reddit."""
    if not isinstance(sources, list) or not sources:
        return False
    if any(isinstance(s, dict) and s.get("name") == "reddit" for s in sources):
        return True
    return (
        len(sources) == 1
        and isinstance(sources[0], dict)
        and str(sources[0].get("source", "")).lower() == "reddit"
    )


def regenerate_reddit_signal(
    entry: dict[str, Any],
    views: int,
    competition_gap: int,
    sentiment: str | None,
    rng,
) -> dict[str, Any]:
    """One refreshed Reddit entry keeping the marker key `entry` used."""
    if entry.get("name") == "reddit":
        mentions = int(entry.get("mentions") or 0)
        return {
            "name": "reddit",
            "sentiment": sentiment or entry.get("sentiment") or "rising",
            "mentions": round_half_up(mentions * (0.95 + rng.random() * 0.1)),
            "trend": f"{format_count(views)} upvotes",
        }

    view_var = round_half_up(views * (0.95 + rng.random() * 0.1))
    gap_var = round_half_up(competition_gap + (rng.random() * 8 - 4))
    return {
        "source": entry.get("source") or "reddit",
        "metric": "Mentions",
        "value": f"{round_half_up(view_var / 200)}+",
        "change": round_half_up(gap_var * 0.6 + rng.random() * 8),
        "icon": "💬",
    }


def regenerate_sources(
    sources: Any,
    views: int,
    demand_velocity: int,
    competition_gap: int,
    sentiment: str | None,
    rng,
) -> list[dict[str, Any]]:
    if is_reddit_only(sources):
        entry = next(
            (s for s in sources if isinstance(s, dict) and s.get("name") == "reddit"),
            sources[0],
        )
        return [regenerate_reddit_signal(entry, views, competition_gap, sentiment, rng)]
    return generate_standard_sources(views, demand_velocity, competition_gap, rng)
