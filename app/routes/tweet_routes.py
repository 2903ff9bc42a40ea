from fastapi import APIRouter, Depends, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging

from app.schemas import ErrorResponse
from app.services.tweet_proxy import TweetProxyService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_tweet_proxy(request: Request) -> TweetProxyService:
    """The proxy service is built once per application by `create_app`."""
    return request.app.state.tweet_proxy


@router.get(
    "/getTweets",
    responses={
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def get_tweets(
    next_token: Optional[str] = None,
    username: Optional[str] = None,
    proxy: TweetProxyService = Depends(get_tweet_proxy),
):
    """Latest tweets for the configured account, passed through from X verbatim."""
    result = await proxy.get_tweets(next_token=next_token, username=username)

    headers = {"Cache-Control": proxy.settings.cache_control, **result.headers}
    if result.cache_tag:
        headers["X-Cache"] = result.cache_tag
    logger.info("getTweets -> %s %s", result.status_code, result.cache_tag or "-")
    return JSONResponse(status_code=result.status_code, content=result.body, headers=headers)


@router.options("/getTweets", status_code=204)
async def preflight_tweets():
    return Response(status_code=204)


async def tweets_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """405 for any method on getTweets other than GET/OPTIONS; everything else keeps FastAPI's default."""
    if exc.status_code == 405 and request.url.path.endswith("/getTweets"):
        return JSONResponse(
            status_code=405,
            content={"error": "Method not allowed"},
            headers={"Allow": "GET, OPTIONS"},
        )
    return await http_exception_handler(request, exc)
