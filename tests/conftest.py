"""Shared fixtures: an ApolloClient wired to an in-process fake Apollo."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from core.apollo_client import ApolloClient
from core.config import ApolloConfig


class FakeApollo:
    """Records every request and answers from a route table.

    Routes map (method, path) to either a JSON-able payload, an
    ``httpx.Response``, or a callable ``request -> Response``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, answer: Any) -> None:
        self.routes[(method, path)] = answer

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        if callable(answer):
            return answer(request)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def last(self) -> httpx.Request:
        return self.requests[-1]

    def paths(self) -> list[str]:
        return [f"{r.url.host}{r.url.path}" for r in self.requests]


@pytest.fixture
def config() -> ApolloConfig:
    return ApolloConfig(api_key="test-key")


@pytest.fixture
def fake_apollo() -> FakeApollo:
    return FakeApollo()


@pytest.fixture
def client(config: ApolloConfig, fake_apollo: FakeApollo):
    with ApolloClient(config, transport=httpx.MockTransport(fake_apollo.handler)) as c:
        yield c


@pytest.fixture
def failing_client(config: ApolloConfig) -> Callable[[Exception], ApolloClient]:
    """Client whose transport raises the given exception for every request."""
    created: list[ApolloClient] = []

    def _make(exc: Exception) -> ApolloClient:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        c = ApolloClient(config, transport=httpx.MockTransport(_raise))
        created.append(c)
        return c

    yield _make
    for c in created:
        c.close()
