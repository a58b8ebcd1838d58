from __future__ import annotations

import json
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from chat_proxy.config import Settings
from chat_proxy.main import create_app

TEST_KEY = "sk-test-key"
BASE_URL = "https://upstream.test"


def completion(content: str, finish_reason: str | None = "stop") -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "deepseek-chat",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": finish_reason,
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
    }


class Upstream:
    """Records outbound requests and answers them with a canned response."""

    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else completion("Hi there")
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_settings(**overrides) -> Settings:
    values = {
        "DEEPSEEK_API_KEY": TEST_KEY,
        "DEEPSEEK_API_URL": BASE_URL,
        "DEEPSEEK_MODEL": "deepseek-chat",
        "APP_ENV": "dev",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def client_factory() -> Callable[..., TestClient]:
    """Yields a factory so tests can choose the upstream and settings."""
    opened: List[TestClient] = []

    def factory(upstream: Upstream, **overrides) -> TestClient:
        app = create_app(make_settings(**overrides), transport=httpx.MockTransport(upstream))
        c = TestClient(app)
        c.__enter__()
        opened.append(c)
        return c

    yield factory
    for c in opened:
        c.__exit__(None, None, None)


@pytest.fixture
def client(client_factory, upstream) -> TestClient:
    return client_factory(upstream)
