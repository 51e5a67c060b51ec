import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes.comments import router as comments_router
from app.api.schemas import ErrorResponse
from app.api.validation import RequestValidationFailed
from app.collectors.google_play import PlayStoreClient
from app.core.config import Settings, load_settings
from app.core.ratelimit import FixedWindowRateLimiter

VERSION = "1.0.0"

log = logging.getLogger(__name__)


def _error(status_code: int, error: str, message: Optional[str] = None, headers=None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def create_app(
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API around one immutable Settings object."""
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Play Store Comments API", version=VERSION)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.play_store = PlayStoreClient(settings, transport=transport)
    app.state.rate_limiter = FixedWindowRateLimiter(
        settings.rate_limit_max, settings.rate_limit_window_seconds
    )

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[o.strip() for o in settings.cors_origin.split(",")],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
        if request.url.path.startswith("/api/") and limiter.enabled:
            client_key = request.client.host if request.client else "unknown"
            if not limiter.hit(client_key):
                log.warning("rate_limit_exceeded", extra={"client": client_key, "path": request.url.path})
                return _error(
                    429, settings.rate_limit_message,
                    headers={"Retry-After": str(limiter.retry_after(client_key))},
                )
        return await call_next(request)

    @app.exception_handler(RequestValidationFailed)
    async def validation_failed(request: Request, exc: RequestValidationFailed):
        log.info("request_validation_failed", extra={"path": request.url.path, "error": exc.error})
        return _error(400, exc.error, exc.message)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        problems = "; ".join(str(e.get("msg")) for e in exc.errors())
        return _error(400, "Invalid request body", problems or None)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error(404, "Endpoint not found",
                          f"The requested endpoint {request.url.path} does not exist")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        log.exception("unhandled_error", extra={"path": request.url.path})
        return _error(500, "Internal server error")

    @app.get("/health")
    async def health_check():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "environment": settings.environment,
        }

    @app.get("/")
    async def index():
        return {
            "message": "Play Store Comments API",
            "version": VERSION,
            "endpoints": {
                "health": "GET /health",
                "comments": "GET /api/comments/{appId}?limit=50&sort=recent",
                "stats": "GET /api/comments/{appId}/stats?limit=100",
                "info": "GET /api/comments/{appId}/info",
                "batch": "POST /api/comments/batch",
            },
        }

    app.include_router(comments_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
