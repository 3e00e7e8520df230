"""Tests for the methods example."""

import logging

import pytest

from perch.testing import TestClient


class TestMethodsApp:
    async def test_get_home(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert response.text == "GET request to the homepage"

    async def test_post_home(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/")
            assert response.text == "POST request to the homepage"

    async def test_put_home_not_found(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.put("/")
            assert response.status == 404
            assert response.text == "Cannot PUT /"

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "PATCH"])
    async def test_secret_answers_every_method(self, example_app, method: str) -> None:
        async with TestClient(example_app) as client:
            response = await client.request(method, "/secret")
            assert response.status == 200
            assert response.text == f"{method} request to the secret section"

    async def test_secret_runs_middleware_first(
        self, example_app, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="example.methods"):
            async with TestClient(example_app) as client:
                await client.get("/secret")
        assert "Accessing the secret section ..." in caplog.messages
