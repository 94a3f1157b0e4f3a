"""Shared test fixtures and configuration."""

import os
import random

import pytest

# Point the app at an in-memory database and keep real keys out of tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("ANTHROPIC_API_KEY", "")
os.environ.setdefault("APIFY_API_TOKEN", "")
os.environ.setdefault("REDDIT_RAPIDAPI_KEY", "")
os.environ.setdefault("SUPABASE_JWT_SECRET", "")

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from mothership.models import Base  # noqa: E402


class FixedRandom(random.Random):
    """random.Random whose random() always returns `value` (sample/choice stay seeded)."""

    def __init__(self, value: float = 0.5, seed: int = 7):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def rng():
    return FixedRandom(0.5)


@pytest.fixture
def tiktok_items():
    """Apify dataset items for three videos (900K views, 5% engagement)."""
    return [
        {
            "text": "Networking as an introvert is exhausting #career #introvert",
            "playCount": 400_000, "diggCount": 30_000, "shareCount": 8_000,
            "collectCount": 12_000, "commentCount": 900,
            "webVideoUrl": "https://www.tiktok.com/@a/video/1",
            "hashtags": [{"name": "career"}, {"name": "introvert"}],
        },
        {
            "text": "Nobody replies to remote job applications anymore",
            "playCount": 300_000, "diggCount": 20_000, "shareCount": 6_000,
            "collectCount": 9_000, "commentCount": 700,
            "webVideoUrl": "https://www.tiktok.com/@b/video/2",
            "hashtags": ["jobsearch"],
        },
        {
            "text": "Salary negotiation scripts that actually worked",
            "playCount": 200_000, "diggCount": 15_000, "shareCount": 4_000,
            "collectCount": 6_000, "commentCount": 400,
            "webVideoUrl": "https://www.tiktok.com/@c/video/3",
            "hashtags": [],
        },
    ]


@pytest.fixture
def extracted_problems_input():
    """A well-formed extract_problems tool input with three problems."""
    def problem(title, dv, cg, sentiment="rising"):
        return {
            "title": title,
            "subtitle": f"{title}: subtitle",
            "sentiment": sentiment,
            "painPoints": ["First pain", "Second pain"],
            "hiddenInsight": {
                "surfaceAsk": "How do I fix this?",
                "realProblem": "I need confidence, not tips",
                "hiddenSignal": "Confidence tooling is underserved",
            },
            "demandVelocity": dv,
            "competitionGap": cg,
        }

    return {"problems": [
        problem("Networking drains introverts", 90, 70, "exploding"),
        problem("Job applications vanish into the void", 80, 60),
        problem("Salary talks feel terrifying", 70, 80, "stable"),
    ]}


@pytest.fixture
def reddit_posts_payload():
    """getPostsBySubreddit response in the `data.children[].data` shape."""
    def child(pid, title, score, comments, selftext=""):
        return {"data": {
            "id": pid,
            "title": title,
            "selftext": selftext,
            "score": score,
            "num_comments": comments,
            "created_utc": 1_700_000_000,
            "permalink": f"/r/findapath/comments/{pid}/slug/",
            "upvote_ratio": 0.9,
        }}

    return {"data": {"children": [
        child("p1", "I'm 30 and have no idea what career to pursue", 1200, 300,
              "Every path feels wrong. I keep switching. Nothing sticks."),
        child("p2", "Is it too late to switch into tech?", 800, 150, "Bootcamps look like scams."),
        child("p3", "Burned out after two years in finance", 2400, 90),
        child("p4", "How did you find your calling?", 100, 20),
    ]}}
