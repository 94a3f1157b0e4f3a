"""Pipeline V: builder verification.

Flow: GitHub repos → payment key format → Supabase key format → score → store.
No caching, no LLM. A failed store write is logged, never surfaced.
"""

import logging
from datetime import datetime, timezone

import httpx

from mothership.integrations.github import GitHubClient
from mothership.orchestrator.schemas import GitHubCheck, VerificationResult, VerifyBuilderInput
from mothership.pipelines.verification.checks import (
    check_payment,
    check_supabase_key,
    extract_github_username,
    github_invalid,
    score_verification,
    summarize_repos,
)
from mothership.services.store import VerificationStore

logger = logging.getLogger(__name__)


class BuilderVerifier:
    def __init__(self, store: VerificationStore, github: GitHubClient | None = None):
        self.store = store
        self.github = github or GitHubClient()

    async def verify_github(self, raw: str) -> GitHubCheck:
        username = extract_github_username(raw)
        if username is None:
            logger.info("Verification | rejected GitHub username | raw=%s", raw[:100])
            return github_invalid(raw.strip(), "GitHub profile not found")
        try:
            lookup = await self.github.list_repos(username)
        except httpx.HTTPError as e:
            logger.warning("Verification | GitHub lookup failed | user=%s | %s", username, str(e)[:200])
            return github_invalid(username, "Failed to verify GitHub profile")

        if not lookup.found:
            return github_invalid(username, "GitHub profile not found")
        return summarize_repos(username, lookup.repos)

    async def execute(self, user_id: str, inp: VerifyBuilderInput) -> VerificationResult:
        github = await self.verify_github(inp.github_username)
        payment = check_payment(inp.payment_provider, inp.stripe_public_key, inp.polar_public_key)
        supabase = check_supabase_key(inp.supabase_project_key)
        overall = score_verification(github, payment, supabase)

        result = VerificationResult(github=github, payment=payment, supabase=supabase, overall=overall)
        logger.info(
            "Verification | user=%s | score=%d | verified=%s",
            user_id, overall.score, overall.verified,
        )

        try:
            await self.store.upsert(user_id, {
                "github_username": inp.github_username,
                "stripe_public_key": inp.stripe_public_key,
                "polar_public_key": inp.polar_public_key,
                "supabase_project_key": inp.supabase_project_key,
                "verification_status": "verified" if overall.verified else "failed",
                "verification_result": result.to_wire(),
                "verified_at": datetime.now(timezone.utc) if overall.verified else None,
            })
        except Exception as e:
            logger.error("Verification | store failed | user=%s | %s", user_id, str(e)[:200])

        return result
