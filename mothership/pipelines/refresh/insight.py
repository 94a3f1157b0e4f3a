"""Hidden-insight backfill for problems missing the surfaceAsk/realProblem/hiddenSignal triple.

Uses the `generate_hidden_insight` tool when an Anthropic key is configured;
otherwise (or when the call fails) picks a template deterministically from
the problem title.
"""

import json
import logging
import zlib

from pydantic import ValidationError

from mothership.config import settings
from mothership.orchestrator.schemas import HiddenInsight
from mothership.services.llm_client import call_tool, load_prompt

logger = logging.getLogger(__name__)

HIDDEN_INSIGHT_TOOL = {
    "name": "generate_hidden_insight",
    "description": "Return the hidden insight behind a market problem",
    "input_schema": {
        "type": "object",
        "properties": {
            "surfaceAsk": {"type": "string", "description": "What people literally ask for"},
            "realProblem": {"type": "string", "description": "The underlying need behind the ask"},
            "hiddenSignal": {"type": "string", "description": "The market signal a builder should act on"},
        },
        "required": ["surfaceAsk", "realProblem", "hiddenSignal"],
    },
}

SURFACE_TEMPLATES = (
    "How do I solve {category} issues?",
    "What's the best {category} solution?",
    "I need help with {pain}",
)

REAL_PROBLEM_TEMPLATES = (
    "Users feel overwhelmed by existing solutions and want simplicity",
    "The emotional burden of {category} is underestimated",
    "People seek validation, not just solutions",
)

HIDDEN_SIGNAL_TEMPLATES = (
    "Market gap exists for human-centered {category} approaches",
    "Community-driven solutions outperform solo tools",
    "Simplification is the new premium feature",
)


def fallback_insight(title: str, category: str | None, pain_points: list[str] | None) -> HiddenInsight:
    """Same title -> same insight."""
    category = (category or "this").lower()
    pain = pain_points[0].lower() if pain_points else category
    seed = zlib.crc32(title.encode("utf-8"))

    values = {"category": category, "pain": pain}
    return HiddenInsight(
        surface_ask=SURFACE_TEMPLATES[seed % 3].format(**values),
        real_problem=REAL_PROBLEM_TEMPLATES[(seed // 3) % 3].format(**values),
        hidden_signal=HIDDEN_SIGNAL_TEMPLATES[(seed // 9) % 3].format(**values),
    )


async def generate_hidden_insight(
    title: str,
    category: str | None,
    pain_points: list[str] | None,
) -> HiddenInsight:
    if not settings.has_anthropic_key:
        return fallback_insight(title, category, pain_points)

    user_message = json.dumps(
        {"title": title, "category": category or "", "painPoints": pain_points or []},
        ensure_ascii=False,
    )
    try:
        tool_input = await call_tool(
            system=load_prompt("hidden_insight"),
            user_message=user_message,
            tool=HIDDEN_INSIGHT_TOOL,
            max_tokens=800,
        )
        if tool_input is not None:
            return HiddenInsight.model_validate(tool_input)
    except ValidationError as e:
        logger.warning("Hidden insight malformed | title=%s | %s", title[:80], str(e)[:200])
    except Exception as e:
        logger.warning("Hidden insight LLM failed | title=%s | %s", title[:80], str(e)[:200])

    return fallback_insight(title, category, pain_points)
