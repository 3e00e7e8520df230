"""Immutable HTTP request.

Frozen metadata with async body access. Each matched route sees its own
copy carrying that route's parameters and the path relative to the
router it was registered on.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.query import QueryParams

if TYPE_CHECKING:
    from perch.routing.route import RouteMatch


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


def normalize_path(path: str) -> str:
    """Make *path* absolute. The query string is never part of it."""
    if not path:
        return "/"
    if not path.startswith("/"):
        return "/" + path
    return path


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Attributes:
        method: Upper-case request method.
        path: Path relative to the router that matched, e.g. ``/about``
            inside a router mounted at ``/birds``.
        original_path: The full request path.
        base_path: Mount prefixes stripped from ``original_path``.
        params: Parameters captured by the matched route.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    params: dict[str, str] = field(default_factory=dict)
    original_path: str = ""
    base_path: str = ""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive = _no_body

    # Private: mutable cache for the body, shared by every per-route copy
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.original_path:
            object.__setattr__(self, "original_path", self.path)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request URL (original path + query string)."""
        qs = self.query.raw
        if qs:
            return f"{self.original_path}?{qs.decode('latin-1')}"
        return self.original_path

    def with_match(self, match: RouteMatch) -> Request:
        """The request as seen by the handlers of *match*."""
        return replace(
            self,
            path=match.remaining_path,
            base_path=match.mount_path,
            params=dict(match.params),
        )

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls, from any
        handler in any route.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        path = normalize_path(scope["path"])
        return cls(
            method=scope["method"].upper(),
            path=path,
            original_path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
