"""TikTok problem extraction: videos in, tagged ExtractionResult out.

Forces the `extract_problems` tool. Items that fail validation are dropped
one by one. A failed call, a missing tool call or a call with no valid items
yields `kind="fallback"`.
"""

import logging

from pydantic import ValidationError

from mothership.integrations.apify import TikTokVideo
from mothership.orchestrator.schemas import ExtractedProblem, ExtractionResult
from mothership.services.llm_client import call_tool, load_prompt
from mothership.utils.niche_data import Niche, niche_label

logger = logging.getLogger(__name__)

MAX_VIDEOS_IN_PROMPT = 30
MAX_TEXT_CHARS = 300

EXTRACT_PROBLEMS_TOOL = {
    "name": "extract_problems",
    "description": "Return the recurring consumer problems found in the videos",
    "input_schema": {
        "type": "object",
        "properties": {
            "problems": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "subtitle": {"type": "string"},
                        "sentiment": {"type": "string", "enum": ["exploding", "rising", "stable", "declining"]},
                        "painPoints": {"type": "array", "items": {"type": "string"}},
                        "hiddenInsight": {
                            "type": "object",
                            "properties": {
                                "surfaceAsk": {"type": "string"},
                                "realProblem": {"type": "string"},
                                "hiddenSignal": {"type": "string"},
                            },
                            "required": ["surfaceAsk", "realProblem", "hiddenSignal"],
                        },
                        "demandVelocity": {"type": "number", "minimum": 0, "maximum": 100},
                        "competitionGap": {"type": "number", "minimum": 0, "maximum": 100},
                    },
                    "required": [
                        "title", "subtitle", "sentiment", "painPoints",
                        "hiddenInsight", "demandVelocity", "competitionGap",
                    ],
                },
            },
        },
        "required": ["problems"],
    },
}

ProblemExtraction = ExtractionResult[ExtractedProblem]


def build_video_digest(videos: list[TikTokVideo]) -> str:
    """Top videos by views, one block each."""
    top = sorted(videos, key=lambda v: v.views, reverse=True)[:MAX_VIDEOS_IN_PROMPT]
    blocks = []
    for i, video in enumerate(top, 1):
        tags = " ".join(f"#{t}" for t in video.hashtags[:8])
        blocks.append(
            f"VIDEO {i}: \"{video.text[:MAX_TEXT_CHARS]}\"\n"
            f"Views: {video.views} | Likes: {video.likes} | Shares: {video.shares} | "
            f"Saves: {video.saves} | Comments: {video.comments}\n"
            f"Hashtags: {tags or 'none'}"
        )
    return "\n---\n".join(blocks)


def parse_problems(tool_input: dict) -> ProblemExtraction:
    raw = tool_input.get("problems")
    if not isinstance(raw, list):
        return ProblemExtraction(kind="fallback", reason="tool input has no problems list")

    problems = []
    for item in raw:
        try:
            problems.append(ExtractedProblem.model_validate(item))
        except ValidationError as e:
            logger.warning("Extractor | dropped malformed problem | %s", str(e)[:200])
    if not problems:
        return ProblemExtraction(kind="fallback", reason=f"no valid problems ({len(raw)} returned)")
    return ProblemExtraction(kind="ai", problems=problems)


async def extract_problems(videos: list[TikTokVideo], niche: Niche) -> ProblemExtraction:
    label = niche_label(niche)
    user_message = (
        f"Niche: {label}\n"
        f"Analyze these TikTok videos and extract 3-5 real, recurring problems:\n\n"
        f"{build_video_digest(videos)}"
    )

    try:
        tool_input = await call_tool(
            system=load_prompt("tiktok_extractor"),
            user_message=user_message,
            tool=EXTRACT_PROBLEMS_TOOL,
        )
    except Exception as e:
        logger.error("Extractor | LLM failed | niche=%s | %s", niche.value, str(e)[:200])
        return ProblemExtraction(kind="fallback", reason=str(e)[:200])

    if tool_input is None:
        return ProblemExtraction(kind="fallback", reason="no tool call in response")

    result = parse_problems(tool_input)
    logger.info("Extractor | niche=%s | kind=%s | problems=%d", niche.value, result.kind, len(result.problems))
    return result
