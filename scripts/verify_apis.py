#!/usr/bin/env python3
"""Live API check — run with real keys in .env before deploying.

Usage:
  1. Fill in ANTHROPIC_API_KEY, APIFY_API_TOKEN and REDDIT_RAPIDAPI_KEY in .env
  2. Run: python scripts/verify_apis.py

Steps:
  Step 1: Verify .env configuration
  Step 2: GitHub repos lookup (no key required)
  Step 3: Reddit posts + comments via RapidAPI
  Step 4: Anthropic tool call (hidden insight)
  Step 5: Apify TikTok run (slow: one actor run, up to ~90s)
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def step_header(n: int, title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  Step {n}: {title}")
    print(f"{'='*60}\n")


def ok(msg: str) -> None:
    print(f"  ✅ {msg}")


def fail(msg: str) -> None:
    print(f"  ❌ {msg}")


def info(msg: str) -> None:
    print(f"  ℹ️  {msg}")


async def step1_verify_env():
    step_header(1, "Verify .env Configuration")
    from mothership.config import settings

    missing = settings.missing("anthropic_api_key", "apify_api_token", "reddit_rapidapi_key")
    for name in ("ANTHROPIC_API_KEY", "APIFY_API_TOKEN", "REDDIT_RAPIDAPI_KEY"):
        if name in missing:
            fail(f"{name}: NOT SET")
        else:
            ok(f"{name}: set")

    if settings.supabase_jwt_secret:
        ok("SUPABASE_JWT_SECRET: set")
    else:
        info("SUPABASE_JWT_SECRET: not set (verify-builder will answer 401)")

    ok(f"Model: {settings.claude_model}")
    ok(f"Apify actor: {settings.apify_actor_id}")
    return not missing


async def step2_test_github():
    step_header(2, "Test GitHub API")
    from mothership.integrations.github import GitHubClient

    info("Listing repos for 'octocat'")
    lookup = await GitHubClient().list_repos("octocat")
    if lookup.found and lookup.repos:
        ok(f"Got {len(lookup.repos)} repos")
        for repo in lookup.repos[:3]:
            print(f"    - {repo.get('name')} ({repo.get('stargazers_count', 0)} stars)")
        return True
    fail("No repos returned — check network connectivity or rate limits")
    return False


async def step3_test_reddit():
    step_header(3, "Test Reddit (RapidAPI)")
    from mothership.exceptions import UpstreamError
    from mothership.integrations.reddit import RedditClient

    client = RedditClient()
    try:
        posts = await client.fetch_posts("findapath")
    except UpstreamError as e:
        fail(str(e))
        return False

    if not posts:
        fail("No posts returned")
        return False
    ok(f"Got {len(posts)} posts from r/findapath")
    for post in posts[:3]:
        print(f"    - [{post.score}] {post.title[:60]}")

    comments = await client.fetch_comments(posts[0])
    info(f"Comments on first post: {len(comments)}")
    return True


async def step4_test_anthropic():
    step_header(4, "Test Anthropic tool call")
    from mothership.pipelines.refresh.insight import HIDDEN_INSIGHT_TOOL
    from mothership.services.llm_client import call_tool, load_prompt

    tool_input = await call_tool(
        system=load_prompt("hidden_insight"),
        user_message='{"title": "Budgeting apps get abandoned after a week", "category": "finance"}',
        tool=HIDDEN_INSIGHT_TOOL,
        max_tokens=800,
    )
    if tool_input and tool_input.get("surfaceAsk"):
        ok(f"surfaceAsk: {tool_input['surfaceAsk'][:80]}")
        ok(f"hiddenSignal: {tool_input.get('hiddenSignal', '')[:80]}")
        return True
    fail(f"Unexpected tool input: {tool_input}")
    return False


async def step5_test_apify():
    step_header(5, "Test Apify TikTok run")
    from mothership.exceptions import UpstreamError
    from mothership.integrations.apify import ApifyRunPoller, ApifyTikTokClient

    poller = ApifyRunPoller(ApifyTikTokClient())
    info("Running actor for: 'career change at 30'")
    try:
        videos = await poller.run_to_completion(["career change at 30"])
    except UpstreamError as e:
        fail(f"{e} (phase={poller.phase.value}, polls={poller.attempts})")
        return False

    if not videos:
        fail("Run succeeded but the dataset is empty")
        return False
    ok(f"Got {len(videos)} videos after {poller.attempts} polls")
    for video in videos[:3]:
        print(f"    - {video.views:>10,} views | {video.text[:50]}")
    return True


async def main():
    print("\n🚀 Mothership Backend — Real API Verification")
    print("=" * 60)

    results = {}

    results[1] = await step1_verify_env()
    if not results[1]:
        print("\n⚠️  Some keys are missing. Steps that need them will fail.")
        print("   GitHub (step 2) works without any key.\n")

    results[2] = await step2_test_github()
    results[3] = await step3_test_reddit()
    results[4] = await step4_test_anthropic()
    results[5] = await step5_test_apify()

    # Summary
    print(f"\n{'='*60}")
    print("  SUMMARY")
    print(f"{'='*60}")
    for step_n, passed in sorted(results.items()):
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"  Step {step_n}: {status}")

    total_passed = sum(1 for v in results.values() if v)
    total = len(results)
    print(f"\n  {total_passed}/{total} steps passed")
    print(f"{'='*60}\n")

    sys.exit(0 if all(results.values()) else 1)


if __name__ == "__main__":
    asyncio.run(main())
