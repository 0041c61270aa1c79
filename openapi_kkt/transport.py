"""HTTP-транспорт для Open API.

Клиенту нужен только метод request(); httpx.Client ему соответствует,
поэтому в тестах можно подставить httpx.Client с MockTransport.
"""

from collections.abc import Mapping
from typing import Any, Protocol

import httpx

DEFAULT_TIMEOUT = 30.0

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class HttpTransport(Protocol):
    """Синхронный HTTP-клиент, совместимый с httpx.Client.request."""

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        content: str | bytes | None = None,
    ) -> httpx.Response: ...

    def close(self) -> None: ...


def create_http_client(account: str, timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    """Создать HTTP/2 клиент для аккаунта с JSON-заголовками.

    Args:
        account: URL аккаунта Open API
        timeout: Таймаут запросов в секундах

    Returns:
        Настроенный httpx.Client
    """
    return httpx.Client(
        base_url=account,
        headers=DEFAULT_HEADERS,
        http2=True,
        timeout=httpx.Timeout(timeout),
    )
