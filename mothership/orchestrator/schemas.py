"""Pydantic models for API input/output: shared across all pipelines.

Split into: endpoint inputs, LLM tool outputs, and API responses.
Wire names are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

import uuid
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from mothership.utils.formatting import clamp, round_half_up
from mothership.utils.niche_data import Niche, Subreddit

Sentiment = Literal["exploding", "rising", "stable", "declining"]
SENTIMENTS: tuple[str, ...] = ("exploding", "rising", "stable", "declining")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ═══════════════ ENDPOINT INPUTS ═══════════════

class TikTokSearchInput(CamelModel):
    niche: Niche
    force_refresh: bool = False


class RedditSearchInput(CamelModel):
    subreddit_id: Subreddit


class RefreshInput(CamelModel):
    problem_id: uuid.UUID | None = None
    update_all: bool = False


class VerifyBuilderInput(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    github_username: str = Field(min_length=1, max_length=100)
    payment_provider: Literal["stripe", "polar"] | None = None
    stripe_public_key: str | None = Field(default=None, max_length=200)
    polar_public_key: str | None = Field(default=None, max_length=200)
    supabase_project_key: str | None = Field(default=None, max_length=2000)


# ═══════════════ LLM TOOL OUTPUTS ═══════════════

class HiddenInsight(CamelModel):
    """surfaceAsk / realProblem / hiddenSignal triple."""
    surface_ask: str
    real_problem: str
    hidden_signal: str


class ExtractedProblem(CamelModel):
    """One problem from the `extract_problems` tool (TikTok)."""
    title: str = Field(min_length=1)
    subtitle: str = ""
    sentiment: Sentiment = "rising"
    pain_points: list[str] = Field(default_factory=list)
    hidden_insight: HiddenInsight
    demand_velocity: int = 50
    competition_gap: int = 50

    @field_validator("demand_velocity", "competition_gap", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> int:
        try:
            return round_half_up(clamp(float(v), 0, 100))
        except (TypeError, ValueError):
            raise ValueError("score must be a number")

    @field_validator("sentiment", mode="before")
    @classmethod
    def _known_sentiment(cls, v: Any) -> str:
        return v if v in SENTIMENTS else "rising"


class AnalyzedProblem(CamelModel):
    """One problem from the `suggest_problems` tool (Reddit).

    opportunityScore is taken as the model declared it.
    """
    title: str = Field(min_length=1)
    description: str = ""
    opportunity_score: int | float
    sentiment: Sentiment = "rising"
    category: str = ""
    surface_ask: str = ""
    real_problem: str = ""
    hidden_signal: str = ""
    pain_points: list[str] = Field(default_factory=list)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _known_sentiment(cls, v: Any) -> str:
        return v if v in SENTIMENTS else "rising"


P = TypeVar("P")


class ExtractionResult(BaseModel, Generic[P]):
    """Tagged LLM outcome: `ai` even when zero problems, `fallback` when the call failed."""
    kind: Literal["ai", "fallback"]
    problems: list[P] = Field(default_factory=list)
    reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.kind == "fallback"


# ═══════════════ API RESPONSES ═══════════════

class TikTokResult(CamelModel):
    id: str
    title: str
    subtitle: str
    category: str
    sentiment: Sentiment
    views: int
    saves: int
    shares: int
    pain_points: list[str]
    rank: int
    is_viral: bool
    added_to_library: bool
    opportunity_score: int
    demand_velocity: int
    competition_gap: int
    hidden_insight: HiddenInsight
    sources: list[dict[str, Any]]


class RedditResult(CamelModel):
    id: str
    title: str
    description: str
    opportunity_score: int | float
    sentiment: Sentiment
    category: str
    sources: list[dict[str, Any]]
    hidden_insight: HiddenInsight
    pain_points: list[str]
    subreddit_source: str
    total_score: int
    total_comments: int
    is_viral: bool


class RepoSummary(BaseModel):
    name: str
    stars: int


class GitHubCheck(CamelModel):
    valid: bool
    username: str
    has_starred_repos: bool = False
    total_stars: int = 0
    top_repos: list[RepoSummary] = Field(default_factory=list)
    message: str


class PaymentCheck(CamelModel):
    provider: Literal["stripe", "polar"] | None = None
    valid: bool
    key_format: bool
    has_revenue: bool = False
    message: str


class SupabaseCheck(CamelModel):
    valid: bool
    key_format: bool
    message: str


class OverallCheck(CamelModel):
    verified: bool
    score: int
    message: str


class VerificationResult(CamelModel):
    github: GitHubCheck
    payment: PaymentCheck
    supabase: SupabaseCheck
    overall: OverallCheck
