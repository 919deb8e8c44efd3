"""Per-request bookkeeping: request ids, size limit, access log.

An incoming ``X-Request-ID`` is honoured, otherwise one is minted. The id is
bound to ``request_id_var`` so every log line written while handling the
request carries it, and it is echoed back in the response headers.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from ..core.logging import request_id_var

logger = logging.getLogger(__name__)

# Base64 reference images inflate by about a third
DEFAULT_MAX_BODY = 16 * 1024 * 1024


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestResponseMiddleware(BaseHTTPMiddleware):

    def __init__(self, app: ASGIApp, max_request_size: int = DEFAULT_MAX_BODY, access_log: bool = True):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.access_log = access_log

    def _too_large(self, request: Request) -> bool:
        declared = request.headers.get("content-length")
        return bool(declared and declared.isdigit() and int(declared) > self.max_request_size)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            if self._too_large(request):
                response: Response = JSONResponse(
                    status_code=413,
                    content={
                        "error": "RequestTooLarge",
                        "message": f"Request body exceeds {self.max_request_size} bytes",
                    },
                )
            else:
                response = await call_next(request)

            elapsed_ms = int((time.perf_counter() - started) * 1000)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Processing-Time-Ms"] = str(elapsed_ms)
            if self.access_log:
                logger.log(
                    _level_for(response.status_code),
                    f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms}ms",
                    extra={
                        "http_method": request.method,
                        "http_path": request.url.path,
                        "http_status": response.status_code,
                        "duration_ms": elapsed_ms,
                    },
                )
            return response
        finally:
            request_id_var.reset(token)
