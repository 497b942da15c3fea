"""
Per-request context (client address, user agent, acting user)

The middleware in app.main installs a RequestContext for every HTTP request;
get_current_user fills in the user id once the bearer token is verified.
Code running outside a request (scripts, startup hooks) sees None.
"""
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request


@dataclass
class RequestContext:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    user_id: Optional[int] = None


_current: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def context_from_request(request: Request) -> RequestContext:
    return RequestContext(
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


def set_request_context(ctx: Optional[RequestContext]):
    """Install ctx for the current task; returns a token for reset_request_context."""
    return _current.set(ctx)


def reset_request_context(token) -> None:
    _current.reset(token)


def get_request_context() -> Optional[RequestContext]:
    return _current.get()
