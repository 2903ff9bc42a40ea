"""Tweet proxy service.

Fetches a user's tweets from X once per request and falls back to the last good
first page when the upstream is failing, empty or rate limited.
"""
import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from prometheus_client import Counter

from app.core.cache import TweetCache
from app.core.settings import Settings
from app.services.twitter_client import TwitterClient

logger = logging.getLogger(__name__)

# X-Cache tags
MEMORY_FRESH = "MEMORY_FRESH"
MEMORY_REFRESHED = "MEMORY_REFRESHED"
PAGED_NO_CACHE = "PAGED_NO_CACHE"
STALE_BACKOFF = "STALE_BACKOFF"
STALE_429 = "STALE_429"
STALE_ERROR = "STALE_ERROR"
STALE_EMPTY = "STALE_EMPTY"
STALE_EXCEPTION = "STALE_EXCEPTION"

PROXY_RESPONSES = Counter("tweet_proxy_responses_total", "Tweet proxy outcomes", ["outcome"])

# Resolved @handle -> id pairs kept per service, least recently used evicted first
MAX_RESOLVED_USERS = 128


@dataclass
class ProxyResult:
    status_code: int
    body: Any
    cache_tag: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


class UpstreamFailure(Exception):
    """Non-2xx answer from one of the upstream calls."""

    def __init__(self, response, error: str):
        super().__init__(f"{error}: HTTP {response.status_code}")
        self.response = response
        self.error = error


class UserNotFound(Exception):
    def __init__(self, details: Any):
        super().__init__("User not found")
        self.details = details


def parse_retry_after(value: Optional[str], default: int) -> int:
    """Seconds from a Retry-After header; falls back to `default` unless a positive integer."""
    try:
        seconds = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return seconds if seconds > 0 else default


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class TweetProxyService:
    """Owns the single cache slot and backoff deadline for one application instance."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[TwitterClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.clock = clock
        self.cache = TweetCache(clock=clock)
        self._client = client
        self._user_ids: "OrderedDict[str, str]" = OrderedDict()

    @property
    def client(self) -> TwitterClient:
        if self._client is None:
            self._client = TwitterClient.from_settings(self.settings)
        return self._client

    def _result(self, status_code: int, body: Any, cache_tag: Optional[str] = None,
                outcome: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> ProxyResult:
        PROXY_RESPONSES.labels(outcome=outcome or cache_tag or str(status_code)).inc()
        return ProxyResult(status_code=status_code, body=body, cache_tag=cache_tag, headers=headers or {})

    def _serve_cached(self, tag: str) -> ProxyResult:
        logger.info("Serving cached tweets (%s)", tag)
        return self._result(200, self.cache.payload, cache_tag=tag)

    async def _resolve_user_id(self, username: Optional[str]) -> str:
        if not username:
            return self.settings.user_id
        key = username.strip().lstrip("@").lower()
        if key in self._user_ids:
            self._user_ids.move_to_end(key)
            return self._user_ids[key]

        response = await asyncio.to_thread(self.client.get_user_by_username, key)
        if not _is_success(response.status_code):
            raise UpstreamFailure(response, "User lookup failed")
        payload = response.json()
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("id"):
            raise UserNotFound(payload)
        user_id = str(data["id"])
        self._user_ids[key] = user_id
        if len(self._user_ids) > MAX_RESOLVED_USERS:
            self._user_ids.popitem(last=False)
        logger.info("Resolved @%s to user id %s", key, user_id)
        return user_id

    def _handle_upstream_failure(self, exc: UpstreamFailure, first_page: bool) -> ProxyResult:
        response = exc.response
        body = response.text
        can_fall_back = first_page and self.cache.has_data

        if response.status_code == 429:
            seconds = parse_retry_after(response.headers.get("retry-after"),
                                        self.settings.default_backoff_seconds)
            deadline = self.cache.start_backoff(seconds)
            logger.warning("Rate limited by X; backing off for %ss (until %.0f)", seconds, deadline)
            if can_fall_back:
                return self._serve_cached(STALE_429)
            # No cache available: 503 so the UI can show a friendly message
            return self._result(
                503,
                {"error": "Rate limited by X (no cached data)", "detail": body},
                outcome="RATE_LIMITED",
                headers={"Retry-After": str(seconds)},
            )

        logger.warning("%s with HTTP %s", exc.error, response.status_code)
        if can_fall_back:
            return self._serve_cached(STALE_ERROR)
        return self._result(response.status_code, {"error": exc.error, "detail": body},
                            outcome="UPSTREAM_ERROR")

    async def get_tweets(self, next_token: Optional[str] = None, username: Optional[str] = None) -> ProxyResult:
        if not self.settings.twitter_bearer_token:
            return self._result(500, {"error": "Bearer token missing from environment."},
                                outcome="MISSING_CREDENTIAL")

        # Only the default target's first page owns the cache slot
        first_page = not next_token and not username
        target = username or self.settings.twitter_username
        now = self.clock()

        if first_page and self.cache.is_fresh(self.settings.refresh_seconds, now):
            return self._serve_cached(MEMORY_FRESH)

        if first_page and self.cache.has_data and self.cache.in_backoff(now):
            return self._serve_cached(STALE_BACKOFF)

        try:
            user_id = await self._resolve_user_id(target)
            response = await asyncio.to_thread(self.client.get_user_tweets, user_id, next_token)
            if not _is_success(response.status_code):
                raise UpstreamFailure(response, "Tweets fetch failed")
            payload = response.json()
        except UpstreamFailure as exc:
            return self._handle_upstream_failure(exc, first_page)
        except UserNotFound as exc:
            return self._result(404, {"error": "User not found", "details": exc.details},
                                outcome="USER_NOT_FOUND")
        except Exception as exc:
            if first_page and self.cache.has_data:
                logger.warning("Unexpected error fetching tweets, serving stale: %s", exc, exc_info=True)
                return self._serve_cached(STALE_EXCEPTION)
            logger.exception("Error in /api/getTweets")
            return self._result(500, {"error": "Server error", "message": str(exc)},
                                outcome="SERVER_ERROR")

        self.cache.clear_backoff()

        if not isinstance(payload, dict) or not payload.get("data"):
            # Empty but we have cached data: serve stale instead of empty
            if first_page and self.cache.has_data:
                return self._serve_cached(STALE_EMPTY)
            return self._result(404, {"error": "No tweets found or invalid response", "details": payload},
                                outcome="EMPTY")

        if not first_page:
            return self._result(200, payload, cache_tag=PAGED_NO_CACHE)

        entry = self.cache.store(payload)
        logger.info("Cached first page (next_token=%s)", entry.next_token)
        return self._result(200, payload, cache_tag=MEMORY_REFRESHED)
