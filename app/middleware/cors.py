from typing import Dict
from fastapi import Request
from app.core.settings import Settings

ALLOW_METHODS = "GET,OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With"

def cors_headers(settings: Settings) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_origin or "*",
        "Vary": "Origin",
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }

def add_cors_middleware(app, settings: Settings):
    """Stamps the fixed CORS headers on every response, errors included.

    Starlette's CORSMiddleware answers preflights itself with 200, the site expects 204.
    """
    headers = cors_headers(settings)

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response
