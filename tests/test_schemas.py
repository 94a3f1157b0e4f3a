"""Tests for Pydantic schemas: wire names, clamping and coercion."""

import uuid

import pytest
from pydantic import ValidationError

from mothership.orchestrator.schemas import (
    AnalyzedProblem,
    ExtractedProblem,
    ExtractionResult,
    RedditSearchInput,
    RefreshInput,
    TikTokSearchInput,
    VerifyBuilderInput,
)
from mothership.utils.niche_data import Niche, Subreddit

INSIGHT = {"surfaceAsk": "a", "realProblem": "b", "hiddenSignal": "c"}


class TestEndpointInputs:
    def test_tiktok_camel_case(self):
        inp = TikTokSearchInput.model_validate({"niche": "mental-health", "forceRefresh": True})
        assert inp.niche is Niche.MENTAL_HEALTH
        assert inp.force_refresh is True

    def test_tiktok_defaults(self):
        assert TikTokSearchInput.model_validate({"niche": "career"}).force_refresh is False

    @pytest.mark.parametrize("body", [{}, {"niche": "cooking"}, {"niche": 3}])
    def test_tiktok_rejects(self, body):
        with pytest.raises(ValidationError):
            TikTokSearchInput.model_validate(body)

    def test_reddit(self):
        assert RedditSearchInput.model_validate({"subredditId": "problemgambling"}).subreddit_id is Subreddit.PROBLEMGAMBLING
        with pytest.raises(ValidationError):
            RedditSearchInput.model_validate({"subredditId": "askreddit"})

    def test_refresh(self):
        pid = uuid.uuid4()
        assert RefreshInput.model_validate({"problemId": str(pid)}).problem_id == pid
        assert RefreshInput.model_validate({"updateAll": True}).problem_id is None

    def test_verify_strips_and_bounds(self):
        inp = VerifyBuilderInput.model_validate({"githubUsername": "  octocat  ", "paymentProvider": "polar"})
        assert inp.github_username == "octocat"
        assert inp.payment_provider == "polar"
        with pytest.raises(ValidationError):
            VerifyBuilderInput.model_validate({"githubUsername": "x" * 101})
        with pytest.raises(ValidationError):
            VerifyBuilderInput.model_validate({"githubUsername": "   "})
        with pytest.raises(ValidationError):
            VerifyBuilderInput.model_validate({"githubUsername": "a", "stripePublicKey": "pk_" * 100})


class TestExtractedProblem:
    def _problem(self, **overrides):
        data = {"title": "t", "hiddenInsight": INSIGHT, "demandVelocity": 50, "competitionGap": 50}
        data.update(overrides)
        return ExtractedProblem.model_validate(data)

    def test_scores_clamped_and_rounded(self):
        problem = self._problem(demandVelocity=180, competitionGap=-5)
        assert problem.demand_velocity == 100
        assert problem.competition_gap == 0
        assert self._problem(demandVelocity=72.5).demand_velocity == 73
        assert self._problem(demandVelocity="64").demand_velocity == 64

    def test_non_numeric_score_rejected(self):
        with pytest.raises(ValidationError):
            self._problem(demandVelocity="high")
        with pytest.raises(ValidationError):
            self._problem(competitionGap=None)

    def test_unknown_sentiment_coerced(self):
        problem = self._problem(sentiment="emerging", demandVelocity=88)
        assert problem.sentiment == "rising"
        assert problem.demand_velocity == 88
        assert self._problem(sentiment="stable").sentiment == "stable"

    def test_wire_names(self):
        wire = self._problem(painPoints=["p"]).to_wire()
        assert wire["painPoints"] == ["p"]
        assert wire["hiddenInsight"] == INSIGHT
        assert "pain_points" not in wire


class TestAnalyzedProblem:
    def test_sentiment_coerced(self):
        problem = AnalyzedProblem.model_validate({"title": "t", "opportunityScore": 81, "sentiment": "hot"})
        assert problem.sentiment == "rising"

    def test_score_kept_as_given(self):
        assert AnalyzedProblem.model_validate({"title": "t", "opportunityScore": 120.5}).opportunity_score == 120.5

    def test_score_required(self):
        with pytest.raises(ValidationError):
            AnalyzedProblem.model_validate({"title": "t"})


class TestExtractionResult:
    def test_tags(self):
        assert ExtractionResult[AnalyzedProblem](kind="fallback", reason="x").is_fallback
        result = ExtractionResult[AnalyzedProblem](kind="ai")
        assert not result.is_fallback
        assert result.problems == []
