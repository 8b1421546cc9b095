"""Per-request values that log records pick up without threading them through every call."""

import contextvars
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    request_id: str = "-"
    actor: str = "-"
    method: str = "-"
    path: str = "-"


_EMPTY = RequestContext()
_current: contextvars.ContextVar[RequestContext] = contextvars.ContextVar("request_context", default=_EMPTY)


def current() -> RequestContext:
    return _current.get()


def bind_request(request_id: str, method: str, path: str) -> contextvars.Token:
    """Start a fresh context for one HTTP request; pass the token to :func:`reset` when done."""
    return _current.set(RequestContext(request_id=request_id, method=method, path=path))


def bind_actor(email: str) -> None:
    _current.set(replace(_current.get(), actor=email))


def reset(token: contextvars.Token) -> None:
    _current.reset(token)
