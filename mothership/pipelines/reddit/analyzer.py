"""Reddit problem analysis via the `suggest_problems` tool."""

import logging
from typing import Mapping

from pydantic import ValidationError

from mothership.config import settings
from mothership.integrations.reddit import RedditPost
from mothership.orchestrator.schemas import AnalyzedProblem, ExtractionResult
from mothership.services.llm_client import call_tool, load_prompt

logger = logging.getLogger(__name__)

MAX_SELFTEXT_CHARS = 500
COMMENTS_PER_POST = 5

SUGGEST_PROBLEMS_TOOL = {
    "name": "suggest_problems",
    "description": "Return analyzed problems from Reddit content",
    "input_schema": {
        "type": "object",
        "properties": {
            "problems": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "description": {"type": "string"},
                        "opportunityScore": {"type": "number"},
                        "sentiment": {"type": "string", "enum": ["exploding", "rising", "stable", "declining"]},
                        "category": {
                            "type": "string",
                            "enum": ["Career", "Mental Health", "Productivity", "relationships", "finance", "education"],
                        },
                        "surfaceAsk": {"type": "string"},
                        "realProblem": {"type": "string"},
                        "hiddenSignal": {"type": "string"},
                        "painPoints": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": [
                        "title", "description", "opportunityScore", "sentiment", "category",
                        "surfaceAsk", "realProblem", "hiddenSignal", "painPoints",
                    ],
                },
            },
        },
        "required": ["problems"],
    },
}

PostAnalysis = ExtractionResult[AnalyzedProblem]


def build_post_digest(posts: list[RedditPost], comments: Mapping[str, list[str]]) -> str:
    blocks = []
    for post in posts:
        top = comments.get(post.permalink, [])[:COMMENTS_PER_POST]
        comment_text = "\n".join(f"- {c}" for c in top) if top else "No comments"
        blocks.append(
            f"POST TITLE: \"{post.title}\"\n"
            f"Score: {post.score} | Comments: {post.num_comments}\n"
            f"Content: {post.selftext[:MAX_SELFTEXT_CHARS] or 'N/A'}\n\n"
            f"Top Comments:\n{comment_text}"
        )
    return "\n---\n\n".join(blocks)


async def analyze_posts(
    posts: list[RedditPost],
    comments: Mapping[str, list[str]],
    subreddit_name: str,
) -> PostAnalysis:
    if not settings.has_anthropic_key:
        return PostAnalysis(kind="fallback", reason="ANTHROPIC_API_KEY not configured")

    system = load_prompt("reddit_analyzer").replace("{subreddit}", subreddit_name)
    user_message = (
        f"Analyze these posts from {subreddit_name} and extract 3-5 REAL problems:\n\n"
        f"{build_post_digest(posts, comments)}"
    )

    try:
        tool_input = await call_tool(system=system, user_message=user_message, tool=SUGGEST_PROBLEMS_TOOL)
    except Exception as e:
        logger.error("Reddit analyzer | LLM failed | %s | %s", subreddit_name, str(e)[:200])
        return PostAnalysis(kind="fallback", reason=str(e)[:200])

    if tool_input is None or not isinstance(tool_input.get("problems"), list):
        return PostAnalysis(kind="fallback", reason="no tool call in response")

    problems = []
    for item in tool_input["problems"]:
        try:
            problems.append(AnalyzedProblem.model_validate(item))
        except ValidationError as e:
            logger.warning("Reddit analyzer | dropped malformed problem | %s", str(e)[:200])

    logger.info("Reddit analyzer | %s | problems=%d", subreddit_name, len(problems))
    return PostAnalysis(kind="ai", problems=problems)
