"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The request currently being dispatched.
- ``g``: A mutable namespace shared by every handler that runs for the
  current request, across routes and mounted routers.

Both are set by the dispatcher and reset after each request. Accessing
them outside a request raises ``LookupError`` / ``AttributeError``.
"""

from contextvars import ContextVar
from typing import Any

from perch.http.request import Request

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The current request. Set by the ASGI handler before dispatch."""

_g_store: ContextVar[dict[str, Any] | None] = ContextVar("perch_g", default=None)


def get_request() -> Request:
    """Return the current request.

    This is the request as the server received it: ``params`` are only
    on the per-route copy passed to handlers.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


class _RequestGlobals:
    """A mutable namespace scoped to the current request.

    Lets earlier handlers in a chain leave data for later ones::

        def start_timer():
            g.started = time.monotonic()
            return CONTINUE

        def report():
            return f"took {time.monotonic() - g.started:.3f}s"
    """

    __slots__ = ()

    def _get_dict(self) -> dict[str, Any]:
        d = _g_store.get()
        if d is None:
            d = {}
            _g_store.set(d)
        return d

    def _reset(self) -> None:
        _g_store.set(None)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._get_dict()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._get_dict()[name] = value

    def __delattr__(self, name: str) -> None:
        d = self._get_dict()
        try:
            del d[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __contains__(self, name: str) -> bool:
        return name in self._get_dict()

    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute with a default value."""
        return self._get_dict().get(name, default)

    def __repr__(self) -> str:
        return f"<g {self._get_dict()!r}>"


g = _RequestGlobals()
"""Request-scoped namespace. Stores arbitrary per-request data."""
