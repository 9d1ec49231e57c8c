"""Request logging middleware: one request_logs row per API call."""

import logging
import platform
import socket
import time

from fastapi import Request
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from submanager.core.config import settings
from submanager.logging.service import get_session_factory, write_request_log

logger = logging.getLogger(__name__)

MAX_BODY_LENGTH = 4096

# Paths never logged at all, and paths whose bodies carry credentials
EXCLUDED_PATHS = ["/api/logs", "/api/docs", "/api/redoc", "/api/openapi.json"]
SENSITIVE_PATHS = ["/api/auth"]


def _truncate(text: str) -> str:
    if len(text) > MAX_BODY_LENGTH:
        return text[:MAX_BODY_LENGTH] + "...[truncated]"
    return text


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        try:
            self.hostname = socket.gethostname() or platform.node() or "unknown_host"
        except OSError:
            self.hostname = "unknown_host"
        self.application_id = settings.APPLICATION_ID

        logger.info(
            "Logging middleware initialized on host: %s, App ID: %s",
            self.hostname,
            self.application_id,
        )

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith("/api") or any(path.startswith(p) for p in EXCLUDED_PATHS):
            return await call_next(request)

        start_time = time.time()
        sensitive = any(path.startswith(p) for p in SENSITIVE_PATHS)

        # --- Read request body ---
        body_bytes = await request.body()
        request_body = None if sensitive else _truncate(body_bytes.decode("utf-8", errors="ignore"))

        # Reconstruct stream
        async def receive() -> dict:
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        request = Request(request.scope, receive=receive)

        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        status_code = response.status_code

        # Error bodies are buffered so the log shows what the client was told
        response_body = {"text": None}
        if status_code >= 400 and not sensitive and hasattr(response, "body_iterator"):
            original_iterator = response.body_iterator

            async def buffer_iterator():
                chunks = []
                async for chunk in original_iterator:
                    chunks.append(chunk)
                    yield chunk
                response_body["text"] = _truncate(b"".join(chunks).decode("utf-8", errors="ignore"))

            response.body_iterator = buffer_iterator()

        session_factory = get_session_factory(request.app)
        client_ip = request.client.host if request.client else None
        user_agent = request.headers.get("user-agent")

        def log_to_db():
            write_request_log(
                session_factory,
                method=request.method,
                path=path,
                status_code=status_code,
                client_ip=client_ip,
                request_body=request_body,
                response_body=response_body["text"],
                processing_time=duration_ms,
                user_agent=user_agent,
                hostname=self.hostname,
                application_id=self.application_id,
            )

        response.background = BackgroundTask(log_to_db)
        return response
