"""Tests for perch.http.response — Response chaining and Redirect."""

import json

import pytest

from perch.http.response import Redirect, Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.body == ""
        assert r.status == 200
        assert r.content_type == "text/html; charset=utf-8"
        assert r.headers == ()

    def test_with_status(self) -> None:
        assert Response().with_status(201).status == 201

    def test_with_header(self) -> None:
        r = Response().with_header("X-Custom", "value")
        assert r.headers == (("X-Custom", "value"),)

    def test_chained_headers(self) -> None:
        r = Response().with_header("A", "1").with_header("B", "2")
        assert r.headers == (("A", "1"), ("B", "2"))

    def test_with_headers_dict(self) -> None:
        r = Response().with_headers({"A": "1", "B": "2"})
        assert ("A", "1") in r.headers
        assert ("B", "2") in r.headers

    def test_with_content_type(self) -> None:
        r = Response().with_content_type("text/plain")
        assert r.content_type == "text/plain"

    def test_chaining_returns_new_objects(self) -> None:
        r1 = Response("hello")
        r2 = r1.with_status(201)
        r3 = r2.with_header("X-Foo", "bar")

        assert r1.status == 200
        assert r2.status == 201
        assert r2.headers == ()
        assert r3.headers == (("X-Foo", "bar"),)

    def test_header_lookup_is_case_insensitive(self) -> None:
        r = Response().with_header("Location", "/x")
        assert r.header("location") == "/x"
        assert r.header("X-Missing") is None

    def test_body_bytes_from_str(self) -> None:
        assert Response(body="hello").body_bytes == b"hello"

    def test_body_bytes_from_bytes(self) -> None:
        assert Response(body=b"hello").body_bytes == b"hello"

    def test_text_from_bytes(self) -> None:
        assert Response(body=b"hello").text == "hello"

    def test_frozen(self) -> None:
        r = Response()
        with pytest.raises(AttributeError):
            r.status = 404  # type: ignore[misc]


class TestJsonResponse:
    def test_serializes_body(self) -> None:
        r = Response.json({"bird": "owl"})
        assert json.loads(r.text) == {"bird": "owl"}
        assert r.content_type == "application/json; charset=utf-8"

    def test_status(self) -> None:
        assert Response.json([], status=201).status == 201

    def test_unserializable_values_become_strings(self) -> None:
        class Owl:
            def __str__(self) -> str:
                return "owl"

        assert Response.json({"bird": Owl()}).text == '{"bird": "owl"}'


class TestRedirect:
    def test_defaults(self) -> None:
        r = Redirect("/login")
        assert r.url == "/login"
        assert r.status == 302
        assert r.headers == ()
