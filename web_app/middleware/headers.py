"""Client headers middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from brandlink.common.headers import extract_client_headers


class ClientHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to store the client details recorded with clicks."""
    
    async def dispatch(self, request: Request, call_next: Callable):
        """Process request and extract user agent, referrer and forwarded address."""
        client = extract_client_headers(dict(request.headers))
        request.state.user_agent = client["user_agent"]
        request.state.referrer = client["referrer"]
        request.state.forwarded_for = client["forwarded_for"]
        
        response = await call_next(request)
        return response
