"""Tests for perch.http.request — frozen Request with async body access."""

import json

import pytest

from perch.http.request import Request, normalize_path
from perch.routing.route import RouteMatch
from perch.routing.router import Router


def _make_scope(**overrides: object) -> dict[str, object]:
    """Build a minimal valid ASGI HTTP scope."""
    base: dict[str, object] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "server": ("localhost", 8000),
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    return base


def _make_receive(*bodies: bytes):
    """Create an ASGI receive callable that yields bodies."""
    messages = []
    for i, body in enumerate(bodies):
        is_last = i == len(bodies) - 1
        messages.append({"type": "http.request", "body": body, "more_body": not is_last})
    if not messages:
        messages.append({"type": "http.request", "body": b"", "more_body": False})
    it = iter(messages)

    async def receive():
        return next(it)

    return receive


class TestNormalizePath:
    def test_absolute_unchanged(self) -> None:
        assert normalize_path("/users/7") == "/users/7"

    def test_empty_is_root(self) -> None:
        assert normalize_path("") == "/"

    def test_relative_made_absolute(self) -> None:
        assert normalize_path("users") == "/users"


class TestRequestFromASGI:
    def test_basic_fields(self) -> None:
        scope = _make_scope(method="post", path="/users")
        req = Request.from_asgi(scope, _make_receive())

        assert req.method == "POST"
        assert req.path == "/users"
        assert req.original_path == "/users"
        assert req.base_path == ""
        assert req.params == {}
        assert req.http_version == "1.1"
        assert req.server == ("localhost", 8000)
        assert req.client == ("127.0.0.1", 54321)

    def test_headers_parsed(self) -> None:
        scope = _make_scope(
            headers=[(b"content-type", b"application/json"), (b"accept", b"*/*")]
        )
        req = Request.from_asgi(scope, _make_receive())

        assert req.headers["content-type"] == "application/json"
        assert req.headers["accept"] == "*/*"
        assert req.content_type == "application/json"

    def test_query_params_parsed(self) -> None:
        scope = _make_scope(query_string=b"q=hello&page=2")
        req = Request.from_asgi(scope, _make_receive())

        assert req.query["q"] == "hello"
        assert req.query["page"] == "2"

    def test_missing_server_and_client(self) -> None:
        scope = _make_scope()
        del scope["server"]
        del scope["client"]
        req = Request.from_asgi(scope, _make_receive())

        assert req.server is None
        assert req.client is None

    def test_url_without_query(self) -> None:
        req = Request.from_asgi(_make_scope(path="/users"), _make_receive())
        assert req.url == "/users"

    def test_url_with_query(self) -> None:
        scope = _make_scope(path="/search", query_string=b"q=hello")
        req = Request.from_asgi(scope, _make_receive())
        assert req.url == "/search?q=hello"


class TestWithMatch:
    def test_carries_route_view(self) -> None:
        birds = Router()
        birds.get("/:kind", lambda: "bird")
        app = Router()
        app.use("/birds", birds)

        req = Request(method="GET", path="/birds/owl")
        match = app.match("GET", req.path)
        assert isinstance(match, RouteMatch)
        seen = req.with_match(match)

        assert seen.path == "/owl"
        assert seen.base_path == "/birds"
        assert seen.original_path == "/birds/owl"
        assert seen.params == {"kind": "owl"}

    def test_original_request_untouched(self) -> None:
        r = Router()
        r.get("/:id", lambda: "x")
        req = Request(method="GET", path="/7")
        req.with_match(r.match("GET", "/7"))
        assert req.params == {}

    def test_url_uses_original_path(self) -> None:
        r = Router()
        r.use("/api", lambda: "x")
        req = Request.from_asgi(_make_scope(path="/api/v1", query_string=b"a=1"), _make_receive())
        assert req.with_match(r.match("GET", "/api/v1")).url == "/api/v1?a=1"

    async def test_body_shared_between_route_views(self) -> None:
        r = Router()
        r.post("/x", lambda: "x")
        req = Request.from_asgi(_make_scope(method="POST", path="/x"), _make_receive(b"once"))
        match = r.match("POST", "/x")

        assert await req.with_match(match).body() == b"once"
        assert await req.with_match(match).body() == b"once"


class TestRequestBody:
    async def test_body(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello world"))
        assert await req.body() == b"hello world"

    async def test_body_chunked(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello ", b"world"))
        assert await req.body() == b"hello world"

    async def test_body_empty(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())
        assert await req.body() == b""

    async def test_body_without_receive(self) -> None:
        assert await Request(method="GET", path="/").body() == b""

    async def test_text(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello"))
        assert await req.text() == "hello"

    async def test_json(self) -> None:
        data = json.dumps({"key": "value"}).encode()
        req = Request.from_asgi(_make_scope(), _make_receive(data))
        assert await req.json() == {"key": "value"}

    async def test_stream(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"chunk1", b"chunk2"))
        chunks = [chunk async for chunk in req.stream()]
        assert chunks == [b"chunk1", b"chunk2"]


class TestRequestFrozen:
    def test_cannot_mutate(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())

        with pytest.raises(AttributeError):
            req.method = "POST"  # type: ignore[misc]
