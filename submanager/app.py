"""FastAPI application factory for the subscription back office."""

import logging
import os
from typing import Any, Iterable, Optional, Set

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Route

from submanager import __version__
from submanager.core.config import settings
from submanager.core.database import SessionLocal, init_db
from submanager.core.exceptions import AppError, NotFound
from submanager.core.router import register_routes
from submanager.logging.exception_handlers import (
    app_error_handler,
    general_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
)
from submanager.logging.middleware import LoggingMiddleware

STATIC_DIR = "static"
API_FALLBACK_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _allowed_methods(app: FastAPI, path: str, exclude: Iterable[str] = ()) -> Set[str]:
    """Methods served by any registered route whose pattern matches the path."""
    allowed: Set[str] = set()
    for route in app.routes:
        if not isinstance(route, Route) or route.path in exclude or not route.methods:
            continue
        if route.path_regex.match(path):
            allowed.update(route.methods)
    return allowed


def create_app(session_factory: Optional[Any] = None) -> FastAPI:
    """Build the app. Without a session_factory the configured database is initialized."""
    configure_logging()

    app = FastAPI(
        title="Subscription Manager",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    if session_factory is None:
        init_db()
        session_factory = SessionLocal
    app.state.session_factory = session_factory

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import and include routers FIRST (before catch-all route)
    register_routes(app)

    # The React build is optional; the API works without it
    index_file = os.path.join(STATIC_DIR, "index.html")
    assets_dir = os.path.join(STATIC_DIR, "assets")
    if os.path.isdir(assets_dir):
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    @app.api_route("/api/{full_path:path}", methods=API_FALLBACK_METHODS, include_in_schema=False)
    async def unknown_api_route(request: Request, full_path: str) -> Any:
        # Keep 405 for known paths hit with the wrong method
        allowed = _allowed_methods(
            app, request.url.path, exclude=("/api/{full_path:path}", "/{full_path:path}")
        )
        if allowed:
            raise StarletteHTTPException(
                status_code=405, headers={"Allow": ", ".join(sorted(allowed))}
            )
        raise NotFound("API endpoint not found")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_react_app(request: Request, full_path: str) -> Any:
        if full_path.startswith("api") or not os.path.isfile(index_file):
            raise NotFound("API endpoint not found" if full_path.startswith("api") else "Not found")
        with open(index_file, "r", encoding="utf-8") as f:
            return HTMLResponse(content=f.read())

    return app
