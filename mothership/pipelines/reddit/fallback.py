"""Deterministic problems derived straight from the top posts.

Used whenever the LLM analysis is unavailable. Same posts and comments in,
same problems out.
"""

import re
from typing import Mapping

from mothership.integrations.reddit import RedditPost
from mothership.orchestrator.schemas import AnalyzedProblem
from mothership.utils.formatting import round_half_up

FALLBACK_COUNT = 3
TITLE_CHARS = 120
DESCRIPTION_CHARS = 300
PAIN_POINT_CHARS = 120

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def fallback_score(post: RedditPost) -> int:
    raw = post.score / 200 * 40 + post.num_comments / 30 * 30 + 55
    return round_half_up(min(95, max(55, raw)))


def _pain_points(post: RedditPost, comments: list[str]) -> list[str]:
    if comments:
        return [c[:PAIN_POINT_CHARS] for c in comments[:3]]

    sentences = [s.strip() for s in _SENTENCE_END.split(post.selftext) if s.strip()]
    if sentences:
        return [s[:PAIN_POINT_CHARS] for s in sentences[:3]]
    return [post.title[:PAIN_POINT_CHARS]]


def fallback_problems(
    posts: list[RedditPost],
    comments: Mapping[str, list[str]],
    subreddit_name: str,
    category: str,
) -> list[AnalyzedProblem]:
    """min(3, len(posts)) problems from the highest-scored posts."""
    top = sorted(posts, key=lambda p: p.score, reverse=True)[:FALLBACK_COUNT]

    problems = []
    for post in top:
        title = post.title[:TITLE_CHARS]
        problems.append(AnalyzedProblem(
            title=title,
            description=post.selftext[:DESCRIPTION_CHARS] or title,
            opportunity_score=fallback_score(post),
            sentiment="rising",
            category=category,
            surface_ask=f"Has anyone figured out: {title}",
            real_problem=f"People in {subreddit_name} lack a trusted, step-by-step path through this",
            hidden_signal="High-engagement threads with no accepted answer signal unmet demand for guided support",
            pain_points=_pain_points(post, comments.get(post.permalink, [])),
        ))
    return problems
