"""Application entrypoint.

Centralized settings + structured logging + metrics. The tweet proxy service (cache slot
and backoff deadline) is created per application and kept on `app.state`.
"""
from fastapi import FastAPI, Request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from typing import Callable, Optional

from app.core.logging import configure_logging
from app.core.settings import Settings, settings as default_settings
from app.middleware.cors import add_cors_middleware
from app.middleware.rate_limit import build_limiter, _rate_limit_exceeded_handler
from app.routes import tweet_routes
from app.schemas import ServiceInfo
from app.services.tweet_proxy import TweetProxyService
from app.services.twitter_client import TwitterClient

REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", ["method", "path", "status"])
REQUEST_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["path"])


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[TwitterClient] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="v1", openapi_tags=[
        {"name": "tweets", "description": "Cached proxy over the X user tweets timeline"},
    ])
    app.state.settings = settings
    app.state.tweet_proxy = TweetProxyService(settings, client=client, clock=clock)

    # Attach rate limiting
    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        path = request.url.path
        method = request.method
        with REQUEST_LATENCY.labels(path=path).time():
            response = await call_next(request)
        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        return response

    # Outermost, so rate-limit and error responses carry CORS headers too
    add_cors_middleware(app, settings)

    app.include_router(tweet_routes.router, prefix="/api", tags=["tweets"])
    app.add_exception_handler(StarletteHTTPException, tweet_routes.tweets_http_exception_handler)

    @app.get("/", response_model=ServiceInfo)
    async def root():
        """Root endpoint for the API."""
        return {"message": f"{settings.app_name} is running", "version": app.version}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    logging.getLogger(__name__).info(
        "Tweet proxy ready (refresh=%ss, default backoff=%ss)",
        settings.refresh_seconds, settings.default_backoff_seconds,
    )
    return app


app = create_app()
