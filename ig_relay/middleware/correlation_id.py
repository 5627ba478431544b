"""Correlation ID middleware for request tracing."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

import logfire


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request.

    The ID is taken from the incoming header when the caller sends one,
    otherwise generated, and echoed back on the response so webhook
    deliveries can be matched to their log lines.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(
            self.header_name.lower(),
            str(uuid.uuid4()),
        )
        request.state.correlation_id = correlation_id

        with logfire.span(
            "{method} {path}",
            method=request.method,
            path=request.url.path,
            correlation_id=correlation_id,
        ):
            response = await call_next(request)
            response.headers[self.header_name] = correlation_id
            return response
