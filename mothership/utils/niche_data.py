"""Static niche and subreddit tables: scan queries, labels, categories."""

from enum import Enum
from types import MappingProxyType


class Niche(str, Enum):
    MENTAL_HEALTH = "mental-health"
    WEIGHT_FITNESS = "weight-fitness"
    SKIN_BEAUTY = "skin-beauty"
    GUT_HEALTH = "gut-health"
    PRODUCTIVITY = "productivity"
    CAREER = "career"
    CONNECTIONS = "connections"
    BUSINESS = "business"
    FINANCE = "finance"


class Subreddit(str, Enum):
    FINDAPATH = "findapath"
    FINANCE = "finance"
    PROBLEMGAMBLING = "problemgambling"


NICHE_LABELS = MappingProxyType({
    Niche.MENTAL_HEALTH: "Mental Health",
    Niche.WEIGHT_FITNESS: "Weight & Fitness",
    Niche.SKIN_BEAUTY: "Skin & Beauty",
    Niche.GUT_HEALTH: "Gut Health",
    Niche.PRODUCTIVITY: "Productivity",
    Niche.CAREER: "Career",
    Niche.CONNECTIONS: "Social Connections",
    Niche.BUSINESS: "Business",
    Niche.FINANCE: "Finance",
})

# TikTok search queries per niche; each scan samples two of them.
NICHE_QUERIES = MappingProxyType({
    Niche.MENTAL_HEALTH: (
        "anxiety at night what helps",
        "burnout recovery story",
        "therapy is too expensive",
        "overthinking help",
        "mental health apps dont work",
    ),
    Niche.WEIGHT_FITNESS: (
        "gym anxiety beginner",
        "weight loss plateau help",
        "calorie counting burnout",
        "15 minute workout busy",
        "postpartum body confidence",
    ),
    Niche.SKIN_BEAUTY: (
        "adult acne struggle",
        "skincare routine overwhelming",
        "sunscreen white cast dark skin",
        "when to start retinol",
        "skincare ingredients confusing",
    ),
    Niche.GUT_HEALTH: (
        "bloating every day why",
        "food sensitivity test results",
        "ibs flare up tips",
        "gut brain connection anxiety",
        "healthy food makes me bloated",
    ),
    Niche.PRODUCTIVITY: (
        "to do list anxiety",
        "cant focus phone addiction",
        "morning routine unrealistic",
        "procrastination perfectionism",
        "freelancer work life balance",
    ),
    Niche.CAREER: (
        "networking as an introvert",
        "salary negotiation scared",
        "career change at 30",
        "remote job search no replies",
        "linkedin feels fake",
    ),
    Niche.CONNECTIONS: (
        "making friends as an adult",
        "dating app burnout",
        "social anxiety conversations",
        "moved to a new city lonely",
        "long distance friendship",
    ),
    Niche.BUSINESS: (
        "small business struggles",
        "first customers startup",
        "side hustle not making money",
        "marketing on a budget",
        "solopreneur burnout",
    ),
    Niche.FINANCE: (
        "paycheck to paycheck tips",
        "budgeting doesnt work for me",
        "credit card debt payoff",
        "investing for beginners confused",
        "saving money hacks that work",
    ),
})

SUBREDDITS = MappingProxyType({
    Subreddit.FINDAPATH: MappingProxyType({
        "id": "findapath",
        "name": "r/findapath",
        "description": "Career guidance & life direction",
        "category": "Career",
    }),
    Subreddit.FINANCE: MappingProxyType({
        "id": "finance",
        "name": "r/finance",
        "description": "Personal and market finance questions",
        "category": "finance",
    }),
    Subreddit.PROBLEMGAMBLING: MappingProxyType({
        "id": "problemgambling",
        "name": "r/problemgambling",
        "description": "Recovery and support for gambling addiction",
        "category": "Mental Health",
    }),
})


def niche_label(niche: Niche) -> str:
    return NICHE_LABELS[Niche(niche)]


def niche_slug_to_name(niche: Niche) -> str:
    """Stored `problems.niche` value: the slug with hyphens as spaces."""
    return Niche(niche).value.replace("-", " ")
