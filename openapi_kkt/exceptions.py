"""Исключения для работы с Open API ККТ.

Ответы 400 и 422 исключениями не считаются: тело ответа возвращается
вызывающему коду как есть. Ошибки транспорта (httpx) пробрасываются
напрямую, без обёртки.
"""

from typing import Any


class OpenApiException(Exception):
    """Базовое исключение для ошибок Open API."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class OpenApiAuthException(OpenApiException):
    """Исключение при ошибках получения токена.

    Выбрасывается при:
    - 401 на запрос токена (некорректные app_id / secret)
    - Ответе без поля token
    """


class OpenApiServerException(OpenApiException):
    """Сервер ответил 500 Internal Server Error."""

    def __init__(self, response: Any) -> None:
        super().__init__(
            f"Ошибка Open API: {response.status_code} Internal Server Error"
        )
        self.response = response
        self.status_code: int = response.status_code


class OpenApiProtocolException(OpenApiException):
    """Сервер ответил неожиданным кодом статуса."""

    def __init__(self, body: str, status_code: int) -> None:
        super().__init__(f"Неожиданный ответ Open API ({status_code}): {body}")
        self.body = body
        self.status_code = status_code
