# services/twitter_client.py

import logging
from typing import Dict, Optional

import requests

from app.core.settings import Settings

logger = logging.getLogger(__name__)

# Fields requested so images/avatars render on the site
TWEET_EXPANSIONS = "attachments.media_keys,author_id"
TWEET_FIELDS = "created_at,text,attachments,author_id"
USER_FIELDS = "name,username,profile_image_url"
MEDIA_FIELDS = "url,preview_image_url,alt_text,width,height,type"


class TwitterClient:
    """Thin blocking client for the X/Twitter v2 API.

    Returns raw `requests.Response` objects; status handling is left to the caller.
    """

    def __init__(
        self,
        bearer_token: str,
        base_url: str = "https://api.twitter.com/2",
        timeout: float = 10.0,
        max_results: int = 5,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_results = max_results
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {bearer_token}"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwitterClient":
        return cls(
            bearer_token=settings.twitter_bearer_token,
            base_url=settings.twitter_api_base,
            timeout=settings.request_timeout_seconds,
            max_results=settings.max_results,
        )

    def tweet_params(self, pagination_token: Optional[str] = None) -> Dict[str, str]:
        params = {
            "max_results": str(self.max_results),
            "expansions": TWEET_EXPANSIONS,
            "tweet.fields": TWEET_FIELDS,
            "user.fields": USER_FIELDS,
            "media.fields": MEDIA_FIELDS,
        }
        if pagination_token:
            params["pagination_token"] = str(pagination_token)
        return params

    def get_user_tweets(self, user_id: str, pagination_token: Optional[str] = None) -> requests.Response:
        url = f"{self.base_url}/users/{user_id}/tweets"
        logger.info("GET %s (paginated=%s)", url, bool(pagination_token))
        return self.session.get(url, params=self.tweet_params(pagination_token), timeout=self.timeout)

    def get_user_by_username(self, username: str) -> requests.Response:
        url = f"{self.base_url}/users/by/username/{username.lstrip('@')}"
        logger.info("GET %s", url)
        return self.session.get(url, timeout=self.timeout)
