"""Template-based AI solution suggestions, one set per problem.

The template family is picked by keyword match on the problem category;
market fit is the problem's opportunity score plus a bounded random offset,
capped per template.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from mothership.utils.formatting import round_half_up


@dataclass(frozen=True)
class SolutionTemplate:
    title: str
    description: str
    approach: str
    tech_stack: tuple[str, ...]
    offset: int
    spread: int
    cap: int


TEMPLATE_FAMILIES = MappingProxyType({
    "business": (
        SolutionTemplate(
            title="{topic} Revenue Copilot",
            description="A lightweight dashboard that turns scattered {topic} data into weekly action items.",
            approach="Connect existing tools, surface the three numbers that matter, and nudge owners when they drift.",
            tech_stack=("Next.js", "Supabase", "Stripe", "OpenAI"),
            offset=5, spread=10, cap=95,
        ),
        SolutionTemplate(
            title="{topic} Playbook Marketplace",
            description="Peer-reviewed playbooks from operators who already solved this {topic} problem.",
            approach="Curate proven templates, charge per playbook, and let buyers rate outcomes.",
            tech_stack=("React", "Supabase", "Stripe"),
            offset=0, spread=12, cap=90,
        ),
    ),
    "productivity": (
        SolutionTemplate(
            title="{topic} Focus Mode",
            description="A do-less planner that picks the one {topic} task worth doing today.",
            approach="Limit the list to three items, hide everything else, and celebrate finishing early.",
            tech_stack=("React Native", "Supabase", "OpenAI"),
            offset=8, spread=8, cap=95,
        ),
        SolutionTemplate(
            title="{topic} Autopilot",
            description="Automations that clear recurring {topic} busywork without another app to check.",
            approach="Hook into calendar and inbox, batch the small stuff, and report weekly time saved.",
            tech_stack=("Python", "FastAPI", "Zapier"),
            offset=2, spread=10, cap=90,
        ),
    ),
    "health": (
        SolutionTemplate(
            title="{topic} Micro-Coach",
            description="On-demand two-minute {topic} interventions instead of month-long programs.",
            approach="Trigger short guided sessions at the moment of need and adapt to what actually helps.",
            tech_stack=("React Native", "Supabase", "OpenAI"),
            offset=6, spread=10, cap=95,
        ),
        SolutionTemplate(
            title="{topic} Circles",
            description="Small accountability groups for people working through the same {topic} struggle.",
            approach="Match members by goal, run weekly check-ins, and keep groups under eight people.",
            tech_stack=("Next.js", "Supabase", "Twilio"),
            offset=0, spread=12, cap=90,
        ),
    ),
    "default": (
        SolutionTemplate(
            title="{topic} Companion",
            description="A focused assistant that removes the first step of every {topic} frustration.",
            approach="Start with the most-shared pain point, ship a single flow, and expand from user requests.",
            tech_stack=("Next.js", "Supabase", "OpenAI"),
            offset=4, spread=10, cap=92,
        ),
        SolutionTemplate(
            title="{topic} Community Hub",
            description="A home for people comparing notes on {topic}, with answers ranked by outcomes.",
            approach="Seed with real threads, reward verified answers, and monetize expert office hours.",
            tech_stack=("React", "Supabase", "Stripe"),
            offset=0, spread=10, cap=88,
        ),
    ),
})

FAMILY_KEYWORDS = (
    ("business", ("business", "finance", "money", "career", "startup", "sales")),
    ("productivity", ("productivity", "focus", "work", "time", "habit")),
    ("health", ("health", "fitness", "mental", "gut", "skin", "beauty", "sleep", "wellness")),
)


def template_family(category: str | None) -> str:
    lowered = (category or "").lower()
    for family, keywords in FAMILY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return family
    return "default"


def market_fit(opportunity: int, template: SolutionTemplate, rng) -> int:
    return min(template.cap, round_half_up(opportunity + template.offset + rng.random() * template.spread))


def build_solutions(
    problem_id: Any,
    category: str | None,
    opportunity: int,
    author_id: str,
    rng,
) -> list[dict[str, Any]]:
    """Solution rows for one problem, ready for ProblemStore.add_solutions."""
    topic = (category or "Problem").strip() or "Problem"
    rows = []
    for template in TEMPLATE_FAMILIES[template_family(category)]:
        rows.append({
            "problem_id": problem_id,
            "title": template.title.format(topic=topic),
            "description": template.description.format(topic=topic.lower()),
            "approach": template.approach,
            "tech_stack": list(template.tech_stack),
            "market_fit": market_fit(opportunity, template, rng),
            "ai_generated": True,
            "created_by": author_id,
        })
    return rows
