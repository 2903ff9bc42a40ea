from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Core
    app_name: str = "Tweet Proxy API"
    environment: str = "development"
    log_level: str = "INFO"

    # Upstream (X / Twitter v2)
    twitter_bearer_token: Optional[str] = None
    twitter_api_base: str = "https://api.twitter.com/2"
    user_id: str = "1802749491268771841"  # discovered rest_id; USER_ID wins if provided
    twitter_username: Optional[str] = None  # resolved via lookup when set
    max_results: int = 5
    request_timeout_seconds: float = 10.0

    # In-process cache + backoff
    refresh_seconds: int = 900
    default_backoff_seconds: int = 300

    # CDN/browser caching: edge 10 min, stale-while-revalidate 30 min, browser 2 min
    cache_control: str = "s-maxage=600, stale-while-revalidate=1800, max-age=120"

    # CORS
    cors_origin: str = "*"

    # Inbound rate limiting
    rate_limit: str = "120/minute"
    rate_limit_enabled: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
