"""Reddit integration through the RapidAPI `reddit34` proxy.

Endpoints:
  GET /getPostsBySubreddit?subreddit=<id>&sort=hot
  GET /getPostComments?postId=<id>&sort=top
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from mothership.config import settings
from mothership.exceptions import UpstreamError

logger = logging.getLogger(__name__)

SERVICE = "Reddit"
MAX_POSTS = 15
MAX_COMMENTS = 10
MIN_COMMENT_LENGTH = 20


@dataclass
class RedditPost:
    title: str
    selftext: str = ""
    score: int = 0
    num_comments: int = 0
    created_utc: float = 0
    permalink: str = ""
    upvote_ratio: float = 0.5

    @property
    def post_id(self) -> str | None:
        """Post id parsed from `/r/<sub>/comments/<id>/...`."""
        if "/comments/" not in self.permalink:
            return None
        return self.permalink.split("/comments/", 1)[1].split("/")[0] or None


def _extract_items(data: Any) -> list[Any]:
    """Find the post list across the response shapes the proxy returns."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []

    inner = data.get("data")
    if isinstance(inner, dict) and isinstance(inner.get("children"), list):
        return inner["children"]
    if isinstance(inner, dict) and isinstance(inner.get("posts"), list):
        return inner["posts"]
    if isinstance(inner, list):
        return inner
    if isinstance(data.get("posts"), list):
        return data["posts"]
    return []


def _parse_post(item: Any, subreddit: str) -> RedditPost | None:
    post = item.get("data", item) if isinstance(item, dict) else None
    if not isinstance(post, dict) or not post.get("title"):
        return None

    permalink = post.get("permalink") or ""
    if not permalink and post.get("id"):
        permalink = f"/r/{subreddit}/comments/{post['id']}"

    return RedditPost(
        title=post["title"],
        selftext=post.get("selftext") or post.get("body") or post.get("content") or "",
        score=int(post.get("score") or post.get("ups") or post.get("upvotes") or 0),
        num_comments=int(post.get("num_comments") or post.get("numComments") or post.get("comments") or 0),
        created_utc=float(post.get("created_utc") or post.get("createdAt") or 0),
        permalink=permalink,
        upvote_ratio=float(post.get("upvote_ratio") or 0.5),
    )


class RedditClient:
    """Async client for subreddit posts and post comments."""

    def __init__(self, api_key: str | None = None, host: str | None = None, timeout: int | None = None):
        self.api_key = api_key or settings.reddit_rapidapi_key
        self.host = host or settings.reddit_rapidapi_host
        self.timeout = timeout or settings.http_timeout_seconds

    @property
    def headers(self) -> dict[str, str]:
        return {"x-rapidapi-key": self.api_key, "x-rapidapi-host": self.host}

    async def fetch_posts(self, subreddit: str) -> list[RedditPost]:
        """Hot posts for `subreddit`. Raises UpstreamError on non-2xx or network failure."""
        url = f"https://{self.host}/getPostsBySubreddit"
        params = {"subreddit": subreddit, "sort": "hot"}

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=self.headers)
        except httpx.HTTPError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("Reddit posts error | r/%s | %dms | %s", subreddit, elapsed_ms, str(e)[:200])
            raise UpstreamError(SERVICE, f"request failed: {str(e)[:200]}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if response.status_code >= 400:
            logger.warning("Reddit posts | r/%s | status=%d | %dms", subreddit, response.status_code, elapsed_ms)
            raise UpstreamError(
                SERVICE,
                f"failed to fetch r/{subreddit}: {response.text[:200]}",
                status_code=response.status_code,
            )

        items = _extract_items(response.json())
        posts = []
        for item in items:
            post = _parse_post(item, subreddit)
            if post is not None:
                posts.append(post)
            if len(posts) >= MAX_POSTS:
                break

        logger.info("Reddit posts OK | r/%s | items=%d posts=%d | %dms", subreddit, len(items), len(posts), elapsed_ms)
        return posts

    async def fetch_comments(self, post: RedditPost) -> list[str]:
        """Top comment bodies for `post`; any failure yields an empty list."""
        post_id = post.post_id
        if not post_id:
            return []

        url = f"https://{self.host}/getPostComments"
        params = {"postId": post_id, "sort": "top"}

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=self.headers)
            elapsed_ms = int((time.monotonic() - start) * 1000)

            if response.status_code >= 400:
                logger.warning("Reddit comments | post=%s | status=%d | %dms", post_id, response.status_code, elapsed_ms)
                return []

            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.warning("Reddit comments error | post=%s | %dms | %s", post_id, elapsed_ms, str(e)[:200])
            return []

        if isinstance(data, dict) and isinstance(data.get("comments"), list):
            items = data["comments"]
        else:
            items = _extract_items(data)

        comments = []
        for item in items[:MAX_COMMENTS]:
            comment = item.get("data", item) if isinstance(item, dict) else {}
            body = comment.get("body") or comment.get("text") or ""
            if len(body) > MIN_COMMENT_LENGTH:
                comments.append(body)

        logger.info("Reddit comments OK | post=%s | comments=%d | %dms", post_id, len(comments), elapsed_ms)
        return comments
