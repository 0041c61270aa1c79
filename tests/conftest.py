"""Общие фикстуры для тестов openapi_kkt.

HTTP-запросы обслуживает FakeOpenApi через httpx.MockTransport:
ответы на /Token выдаются автоматически, остальные берутся из очереди.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

from openapi_kkt import InMemoryCache, OpenApiClient

ACCOUNT = "https://kkt.example.ru/open_api/"
APP_ID = "app-1"
SECRET = "secret-key"
CACHE_KEY = "OpenApiToken app-1"
ISSUED_TOKEN = "NEW-TOKEN"


class FakeOpenApi:
    """Имитация сервера Open API с записью всех запросов."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []
        self.token_responses: list[httpx.Response] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/Token"):
            if self.token_responses:
                return self.token_responses.pop(0)
            return httpx.Response(200, json={"token": ISSUED_TOKEN})
        if not self.responses:
            raise AssertionError(f"Неожиданный запрос: {request.method} {request.url}")
        return self.responses.pop(0)

    def reply(self, status_code: int, body: Any = None, text: str | None = None) -> None:
        """Добавить ответ в очередь."""
        if text is not None:
            self.responses.append(httpx.Response(status_code, text=text))
        else:
            self.responses.append(httpx.Response(status_code, json=body))

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/Token")]

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/Token")]


def request_body(request: httpx.Request) -> dict[str, Any]:
    """Разобрать JSON-тело запроса."""
    return json.loads(request.content)


def request_query(request: httpx.Request) -> dict[str, str]:
    """Параметры query-строки запроса."""
    return dict(request.url.params)


@pytest.fixture
def fake_api() -> FakeOpenApi:
    return FakeOpenApi()


@pytest.fixture
def http_client(fake_api: FakeOpenApi) -> Generator[httpx.Client, None, None]:
    """httpx.Client, отправляющий запросы в FakeOpenApi."""
    client = httpx.Client(transport=httpx.MockTransport(fake_api.handler))
    yield client
    client.close()


@pytest.fixture
def cache() -> InMemoryCache:
    """Пустой кэш токена."""
    return InMemoryCache()


@pytest.fixture
def warm_cache() -> InMemoryCache:
    """Кэш с заранее сохранённым токеном T1."""
    cache = InMemoryCache()
    cache.set(CACHE_KEY, "T1")
    return cache


@pytest.fixture
def make_client(
    http_client: httpx.Client,
) -> Callable[..., OpenApiClient]:
    """Фабрика клиентов, подключённых к FakeOpenApi."""

    def factory(cache: Any, **kwargs: Any) -> OpenApiClient:
        return OpenApiClient(
            account=ACCOUNT,
            app_id=APP_ID,
            secret=SECRET,
            http_client=http_client,
            cache=cache,
            **kwargs,
        )

    return factory


@pytest.fixture
def client(
    make_client: Callable[..., OpenApiClient], warm_cache: InMemoryCache
) -> OpenApiClient:
    """Клиент с токеном T1 из кэша."""
    return make_client(warm_cache)
