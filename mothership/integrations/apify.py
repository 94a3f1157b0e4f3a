"""Apify TikTok scraper integration.

Docs: https://docs.apify.com/api/v2
Flow: POST /acts/{actor}/runs -> poll GET /actor-runs/{id} -> GET /datasets/{id}/items
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from mothership.config import settings
from mothership.exceptions import ScraperRunError, UpstreamError

logger = logging.getLogger(__name__)

SERVICE = "Apify"


class RunPhase(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (RunPhase.SUCCEEDED, RunPhase.FAILED, RunPhase.TIMED_OUT)


# Apify run status -> poller phase
APIFY_STATUS_PHASES = {
    "READY": RunPhase.PENDING,
    "RUNNING": RunPhase.RUNNING,
    "TIMING-OUT": RunPhase.RUNNING,
    "ABORTING": RunPhase.RUNNING,
    "SUCCEEDED": RunPhase.SUCCEEDED,
    "FAILED": RunPhase.FAILED,
    "ABORTED": RunPhase.FAILED,
    "TIMED-OUT": RunPhase.TIMED_OUT,
}


@dataclass
class ApifyRun:
    id: str
    status: str
    dataset_id: str | None = None

    @property
    def phase(self) -> RunPhase:
        return APIFY_STATUS_PHASES.get(self.status, RunPhase.RUNNING)


@dataclass
class TikTokVideo:
    text: str
    views: int = 0
    likes: int = 0
    shares: int = 0
    saves: int = 0
    comments: int = 0
    url: str = ""
    hashtags: list[str] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "TikTokVideo":
        hashtags = []
        for tag in item.get("hashtags") or []:
            name = tag.get("name") if isinstance(tag, dict) else tag
            if name:
                hashtags.append(str(name))
        return cls(
            text=item.get("text") or "",
            views=int(item.get("playCount") or 0),
            likes=int(item.get("diggCount") or 0),
            shares=int(item.get("shareCount") or 0),
            saves=int(item.get("collectCount") or 0),
            comments=int(item.get("commentCount") or 0),
            url=item.get("webVideoUrl") or item.get("url") or "",
            hashtags=hashtags,
        )


def _parse_run(payload: dict[str, Any]) -> ApifyRun:
    data = payload.get("data") or {}
    return ApifyRun(
        id=data.get("id", ""),
        status=data.get("status", "READY"),
        dataset_id=data.get("defaultDatasetId"),
    )


class ApifyTikTokClient:
    """Async client for the Apify actor/run/dataset endpoints."""

    def __init__(
        self,
        token: str | None = None,
        actor_id: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ):
        self.token = token or settings.apify_api_token
        self.actor_id = actor_id or settings.apify_actor_id
        self.base_url = (base_url or settings.apify_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    async def start_run(self, queries: list[str], results_per_query: int | None = None) -> ApifyRun:
        """Start the scraper actor for `queries`."""
        body = {
            "searchQueries": queries,
            "resultsPerPage": results_per_query or settings.apify_results_per_query,
            "searchSection": "/video",
            "excludePinnedPosts": False,
        }
        payload = await self._request("POST", f"/acts/{self.actor_id}/runs", json=body)
        run = _parse_run(payload)
        logger.info("Apify run started | run=%s | queries=%s", run.id, queries)
        return run

    async def get_run(self, run_id: str) -> ApifyRun:
        return _parse_run(await self._request("GET", f"/actor-runs/{run_id}"))

    async def get_dataset_items(self, dataset_id: str) -> list[dict[str, Any]]:
        payload = await self._request("GET", f"/datasets/{dataset_id}/items")
        if not isinstance(payload, list):
            logger.warning("Apify dataset | unexpected payload type=%s", type(payload).__name__)
            return []
        return payload

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, params={"token": self.token}, **kwargs)
        except httpx.HTTPError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("Apify error | %s %s | %dms | %s", method, path, elapsed_ms, str(e)[:200])
            raise UpstreamError(SERVICE, f"request failed: {str(e)[:200]}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if response.status_code >= 400:
            logger.warning(
                "Apify | %s %s | status=%d | %dms",
                method, path, response.status_code, elapsed_ms,
            )
            raise UpstreamError(
                SERVICE,
                f"{method} {path} failed: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.info("Apify OK | %s %s | %dms", method, path, elapsed_ms)
        return response.json()


class ApifyRunPoller:
    """Drives one actor run to a terminal phase.

    The poller sleeps first, then polls, so the minimum wall time is one
    interval. `sleep` is injectable for tests.
    """

    def __init__(
        self,
        client: ApifyTikTokClient,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
    ):
        self.client = client
        self.sleep = sleep
        self.poll_interval = poll_interval if poll_interval is not None else settings.apify_poll_interval_seconds
        self.max_attempts = max_attempts or settings.apify_max_poll_attempts
        self.phase = RunPhase.PENDING
        self.attempts = 0

    async def wait(self, run: ApifyRun) -> ApifyRun:
        """Poll until SUCCEEDED; raise ScraperRunError on any other terminal phase."""
        self.phase = run.phase
        while not self.phase.is_terminal:
            if self.attempts >= self.max_attempts:
                self.phase = RunPhase.TIMED_OUT
                logger.warning("Apify run poll budget exhausted | run=%s | attempts=%d", run.id, self.attempts)
                raise ScraperRunError(run.id, "poll timeout")

            await self.sleep(self.poll_interval)
            self.attempts += 1
            run = await self.client.get_run(run.id)
            self.phase = run.phase
            logger.info(
                "Apify run status | run=%s | status=%s | attempt=%d/%d",
                run.id, run.status, self.attempts, self.max_attempts,
            )

        if self.phase is not RunPhase.SUCCEEDED:
            raise ScraperRunError(run.id, run.status)
        return run

    async def run_to_completion(self, queries: list[str]) -> list[TikTokVideo]:
        """Start a run, wait for it, and return the normalized dataset."""
        run = await self.client.start_run(queries)
        run = await self.wait(run)
        if not run.dataset_id:
            raise ScraperRunError(run.id, "missing dataset")
        items = await self.client.get_dataset_items(run.dataset_id)
        videos = [TikTokVideo.from_item(item) for item in items if isinstance(item, dict)]
        logger.info("Apify dataset | run=%s | videos=%d", run.id, len(videos))
        return videos
