"""Tests for external API integrations: Apify, Reddit (RapidAPI), GitHub."""

import re

import httpx
import pytest

from mothership.exceptions import ScraperRunError, UpstreamError
from mothership.integrations.apify import (
    ApifyRun,
    ApifyRunPoller,
    ApifyTikTokClient,
    RunPhase,
    TikTokVideo,
)
from mothership.integrations.github import GitHubClient
from mothership.integrations.reddit import RedditClient, RedditPost

APIFY = "https://apify.test/v2"


def _run(status, dataset="ds1"):
    return {"data": {"id": "run1", "status": status, "defaultDatasetId": dataset}}


async def _no_sleep(seconds):
    return None


# ═══════════════ Apify ═══════════════


class TestTikTokVideo:
    def test_from_item(self, tiktok_items):
        video = TikTokVideo.from_item(tiktok_items[0])
        assert video.views == 400_000
        assert video.likes == 30_000
        assert video.shares == 8_000
        assert video.saves == 12_000
        assert video.comments == 900
        assert video.hashtags == ["career", "introvert"]
        assert video.url.endswith("/video/1")

    def test_missing_counters_default_to_zero(self):
        video = TikTokVideo.from_item({"text": "hi", "hashtags": ["a"]})
        assert video.views == 0
        assert video.hashtags == ["a"]


class TestApifyRunPoller:
    @pytest.fixture
    def client(self):
        return ApifyTikTokClient(token="tok", base_url=APIFY)

    def test_status_mapping(self):
        assert ApifyRun("r", "READY").phase is RunPhase.PENDING
        assert ApifyRun("r", "RUNNING").phase is RunPhase.RUNNING
        assert ApifyRun("r", "SUCCEEDED").phase is RunPhase.SUCCEEDED
        assert ApifyRun("r", "ABORTED").phase is RunPhase.FAILED
        assert ApifyRun("r", "TIMED-OUT").phase is RunPhase.TIMED_OUT

    @pytest.mark.asyncio
    async def test_run_to_completion(self, httpx_mock, client, tiktok_items):
        httpx_mock.add_response(
            method="POST", url=re.compile(rf"{APIFY}/acts/.+/runs\?token=tok"), json=_run("READY"),
        )
        httpx_mock.add_response(method="GET", url=re.compile(rf"{APIFY}/actor-runs/run1.*"), json=_run("RUNNING"))
        httpx_mock.add_response(method="GET", url=re.compile(rf"{APIFY}/actor-runs/run1.*"), json=_run("SUCCEEDED"))
        httpx_mock.add_response(method="GET", url=re.compile(rf"{APIFY}/datasets/ds1/items.*"), json=tiktok_items)

        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        poller = ApifyRunPoller(client, sleep=record_sleep, poll_interval=3)
        videos = await poller.run_to_completion(["career change at 30"])

        assert len(videos) == 3
        assert poller.phase is RunPhase.SUCCEEDED
        assert poller.attempts == 2
        assert sleeps == [3, 3]

        start = httpx_mock.get_requests(method="POST")[0]
        assert b'"searchSection":"/video"' in start.content.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_failed_run_raises(self, httpx_mock, client):
        httpx_mock.add_response(method="GET", url=re.compile(rf"{APIFY}/actor-runs/run1.*"), json=_run("FAILED"))
        poller = ApifyRunPoller(client, sleep=_no_sleep)
        with pytest.raises(ScraperRunError) as exc:
            await poller.wait(ApifyRun("run1", "RUNNING"))
        assert exc.value.status == "FAILED"
        assert poller.phase is RunPhase.FAILED

    @pytest.mark.asyncio
    async def test_poll_budget_exhausted(self, httpx_mock, client):
        httpx_mock.add_response(
            method="GET", url=re.compile(rf"{APIFY}/actor-runs/run1.*"), json=_run("RUNNING"), is_reusable=True,
        )
        poller = ApifyRunPoller(client, sleep=_no_sleep, max_attempts=4)
        with pytest.raises(ScraperRunError):
            await poller.wait(ApifyRun("run1", "READY"))
        assert poller.attempts == 4
        assert poller.phase is RunPhase.TIMED_OUT

    @pytest.mark.asyncio
    async def test_start_run_http_error(self, httpx_mock, client):
        httpx_mock.add_response(method="POST", url=re.compile(rf"{APIFY}/acts/.*"), status_code=401, text="bad token")
        with pytest.raises(UpstreamError) as exc:
            await client.start_run(["q"])
        assert exc.value.status_code == 401


# ═══════════════ Reddit ═══════════════


class TestRedditClient:
    @pytest.fixture
    def client(self):
        return RedditClient(api_key="key", host="reddit.test")

    @pytest.mark.asyncio
    async def test_fetch_posts_children_shape(self, httpx_mock, client, reddit_posts_payload):
        httpx_mock.add_response(url=re.compile(r"https://reddit\.test/getPostsBySubreddit.*"), json=reddit_posts_payload)
        posts = await client.fetch_posts("findapath")
        assert len(posts) == 4
        assert posts[0].score == 1200
        assert posts[0].post_id == "p1"

        request = httpx_mock.get_requests()[0]
        assert request.headers["x-rapidapi-key"] == "key"
        assert request.url.params["sort"] == "hot"

    @pytest.mark.asyncio
    async def test_fetch_posts_flat_list_shape(self, httpx_mock, client):
        httpx_mock.add_response(
            url=re.compile(r"https://reddit\.test/getPostsBySubreddit.*"),
            json={"success": True, "data": [
                {"title": "A", "ups": 10, "numComments": 2, "id": "x1"},
                {"selftext": "no title"},
            ]},
        )
        posts = await client.fetch_posts("finance")
        assert len(posts) == 1
        assert posts[0].score == 10
        assert posts[0].num_comments == 2
        assert posts[0].permalink == "/r/finance/comments/x1"

    @pytest.mark.asyncio
    async def test_fetch_posts_caps_at_fifteen(self, httpx_mock, client):
        httpx_mock.add_response(
            url=re.compile(r"https://reddit\.test/getPostsBySubreddit.*"),
            json=[{"title": f"post {i}"} for i in range(30)],
        )
        assert len(await client.fetch_posts("finance")) == 15

    @pytest.mark.asyncio
    async def test_fetch_posts_error_raises(self, httpx_mock, client):
        httpx_mock.add_response(url=re.compile(r"https://reddit\.test/getPostsBySubreddit.*"), status_code=503)
        with pytest.raises(UpstreamError):
            await client.fetch_posts("findapath")

    @pytest.mark.asyncio
    async def test_fetch_comments_filters_short_bodies(self, httpx_mock, client):
        httpx_mock.add_response(
            url=re.compile(r"https://reddit\.test/getPostComments.*"),
            json={"data": {"children": [
                {"data": {"body": "too short"}},
                {"data": {"body": "This is a long enough comment to keep"}},
                {"text": "Another long enough comment in flat form"},
            ]}},
        )
        post = RedditPost(title="t", permalink="/r/findapath/comments/p1/slug/")
        comments = await client.fetch_comments(post)
        assert comments == [
            "This is a long enough comment to keep",
            "Another long enough comment in flat form",
        ]
        assert httpx_mock.get_requests()[0].url.params["postId"] == "p1"

    @pytest.mark.asyncio
    async def test_fetch_comments_failure_is_soft(self, httpx_mock, client):
        httpx_mock.add_exception(httpx.ConnectError("boom"))
        post = RedditPost(title="t", permalink="/r/findapath/comments/p1/")
        assert await client.fetch_comments(post) == []

    @pytest.mark.asyncio
    async def test_fetch_comments_without_post_id(self, client):
        assert await client.fetch_comments(RedditPost(title="t")) == []


# ═══════════════ GitHub ═══════════════


class TestGitHubClient:
    @pytest.mark.asyncio
    async def test_list_repos(self, httpx_mock):
        httpx_mock.add_response(
            url=re.compile(r"https://gh\.test/users/octocat/repos.*"),
            json=[{"name": "hello", "stargazers_count": 3}],
        )
        lookup = await GitHubClient(base_url="https://gh.test").list_repos("octocat")
        assert lookup.found is True
        assert lookup.repos[0]["name"] == "hello"
        assert httpx_mock.get_requests()[0].url.params["sort"] == "stars"

    @pytest.mark.asyncio
    async def test_not_found(self, httpx_mock):
        httpx_mock.add_response(url=re.compile(r"https://gh\.test/users/ghost/repos.*"), status_code=404)
        lookup = await GitHubClient(base_url="https://gh.test").list_repos("ghost")
        assert lookup.found is False
        assert lookup.repos == []
