"""
Idea Board — FastAPI application entry-point.

Run with:
    python -m ideaboard
or:
    uvicorn ideaboard.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from ideaboard.config import Settings, settings as default_settings
from ideaboard.logging_config import setup_logging
from ideaboard.middleware import BodySizeLimitMiddleware
from ideaboard.routers import files, ideas
from ideaboard.storage import IdeaStore

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    # helmet's default policy
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(settings: Optional[Settings] = None, store: Optional[IdeaStore] = None) -> FastAPI:
    """Build the application around an explicitly constructed store."""
    settings = settings or default_settings
    store = store or IdeaStore(settings.DB_PATH, echo=settings.DEBUG)

    # ── Lifespan: open the store before serving, close it after draining ──
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.init()
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(title=settings.APP_NAME, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    # ── Error responses: always {"error": "..."} ──
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and message == "Not Found":
            message = "Not found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return _error(500, "Internal server error")

    # ── Middleware ──
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.MAX_UPLOAD_BYTES)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        # Errors are answered here so 500s still pass through CORS.
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await unhandled_error(request, exc)
        # The interactive docs load their assets from a CDN.
        if request.url.path in (app.docs_url, app.redoc_url):
            return response
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ──
    app.include_router(ideas.router)
    app.include_router(files.router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    # ── Static client (optional) ──
    if Path(settings.STATIC_DIR).is_dir():
        app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")

    return app


app = create_app()


def main() -> None:
    setup_logging(default_settings.LOG_LEVEL)
    logger.info(f"{default_settings.APP_NAME} running on port {default_settings.PORT}")
    # uvicorn handles SIGINT/SIGTERM: stop accepting, drain, then lifespan shutdown.
    uvicorn.run(
        app,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_config=None,
    )
