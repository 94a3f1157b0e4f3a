"""Credential checks and the weighted builder score."""

import re

from mothership.orchestrator.schemas import (
    GitHubCheck,
    OverallCheck,
    PaymentCheck,
    RepoSummary,
    SupabaseCheck,
)

GITHUB_USERNAME = r"[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?"
GITHUB_URL = re.compile(
    rf"(?:https?://)?(?:www\.)?github\.com/({GITHUB_USERNAME})/?",
    re.IGNORECASE,
)
GITHUB_USERNAME_ONLY = re.compile(rf"^{GITHUB_USERNAME}$")
STRIPE_KEY = re.compile(r"^pk_(live|test)_[a-zA-Z0-9]+$")
POLAR_KEY = re.compile(r"^[A-Za-z0-9_-]{20,200}$")
POLAR_SANDBOX_MARKERS = ("sandbox",)
SUPABASE_JWT = re.compile(r"^eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+$")
SUPABASE_PUBLISHABLE = re.compile(r"^sb_publishable_[a-zA-Z0-9_-]+$")

VERIFIED_THRESHOLD = 70
MAX_SCORE = 100


def extract_github_username(value: str) -> str | None:
    """Username from a bare name or a profile URL; None when it is neither."""
    trimmed = value.strip()
    match = GITHUB_URL.search(trimmed)
    if match:
        return match.group(1)
    return trimmed if GITHUB_USERNAME_ONLY.match(trimmed) else None


def summarize_repos(username: str, repos: list[dict]) -> GitHubCheck:
    starred = [r for r in repos if (r.get("stargazers_count") or 0) >= 1]
    total_stars = sum(r.get("stargazers_count") or 0 for r in repos)
    return GitHubCheck(
        valid=True,
        username=username,
        has_starred_repos=bool(starred),
        total_stars=total_stars,
        top_repos=[RepoSummary(name=r.get("name", ""), stars=r["stargazers_count"]) for r in starred[:3]],
        message=(
            f"Found {len(starred)} repos with stars ({total_stars} total stars)"
            if starred else "No repos with stars found"
        ),
    )


def github_invalid(username: str, message: str) -> GitHubCheck:
    return GitHubCheck(valid=False, username=username, message=message)


def resolve_provider(
    payment_provider: str | None,
    stripe_key: str | None,
    polar_key: str | None,
) -> str | None:
    if payment_provider:
        return payment_provider
    if stripe_key:
        return "stripe"
    if polar_key:
        return "polar"
    return None


def check_stripe_key(key: str | None) -> PaymentCheck:
    key = key or ""
    valid = bool(STRIPE_KEY.match(key))
    live = valid and key.startswith("pk_live_")
    if not valid:
        message = "Invalid Stripe publishable key format"
    elif live:
        message = "Valid live Stripe key detected - production ready!"
    else:
        message = "Valid test Stripe key (live key preferred for higher verification score)"
    return PaymentCheck(provider="stripe", valid=valid, key_format=valid, has_revenue=live, message=message)


def check_polar_key(key: str | None) -> PaymentCheck:
    key = key or ""
    valid = bool(POLAR_KEY.match(key))
    production = valid and not any(marker in key.lower() for marker in POLAR_SANDBOX_MARKERS)
    if not valid:
        message = "Invalid Polar key format"
    elif production:
        message = "Valid Polar production key detected - production ready!"
    else:
        message = "Valid Polar sandbox key (production key preferred for higher verification score)"
    return PaymentCheck(provider="polar", valid=valid, key_format=valid, has_revenue=production, message=message)


def check_payment(
    payment_provider: str | None,
    stripe_key: str | None,
    polar_key: str | None,
) -> PaymentCheck:
    provider = resolve_provider(payment_provider, stripe_key, polar_key)
    if provider == "stripe":
        return check_stripe_key(stripe_key)
    if provider == "polar":
        return check_polar_key(polar_key)
    return PaymentCheck(valid=False, key_format=False, message="No payment key provided")


def check_supabase_key(key: str | None) -> SupabaseCheck:
    if not key or not key.strip():
        return SupabaseCheck(valid=False, key_format=False, message="Supabase public key not provided (optional)")

    valid = bool(SUPABASE_JWT.match(key) or SUPABASE_PUBLISHABLE.match(key))
    return SupabaseCheck(
        valid=valid,
        key_format=valid,
        message="Valid Supabase public key detected" if valid else "Invalid Supabase public key format",
    )


def score_verification(github: GitHubCheck, payment: PaymentCheck, supabase: SupabaseCheck) -> OverallCheck:
    score = 0
    if github.valid:
        score += 50 if github.has_starred_repos else 25
    if payment.valid:
        score += 50 if payment.has_revenue else 35
    if supabase.valid:
        score += 15

    score = min(score, MAX_SCORE)
    verified = score >= VERIFIED_THRESHOLD
    return OverallCheck(
        verified=verified,
        score=score,
        message=(
            "You're a verified builder! Welcome to the Arena."
            if verified else "Verification incomplete. Please provide valid credentials."
        ),
    )
