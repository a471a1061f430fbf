from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .correlation import extract_correlation_id_from_request, set_correlation_id


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to every request and echo it on the response."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = extract_correlation_id_from_request(request)
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
        finally:
            set_correlation_id(None)

        response.headers[self.header_name] = correlation_id
        return response
