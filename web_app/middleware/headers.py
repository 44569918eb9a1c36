"""Forwarded headers middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortlink.common.headers import client_ip, extract_forwarded_headers


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Stores X-Forwarded-* values and the originating client IP on ``request.state``."""

    async def dispatch(self, request: Request, call_next: Callable):
        headers = dict(request.headers)
        forwarded = extract_forwarded_headers(headers)
        request.state.forwarded_proto = forwarded["forwarded_proto"]
        request.state.forwarded_host = forwarded["forwarded_host"]
        request.state.forwarded_for = forwarded["forwarded_for"]
        request.state.client_ip = client_ip(
            headers, request.client.host if request.client else None
        )

        return await call_next(request)
