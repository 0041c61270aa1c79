"""Модуль для работы с Open API ККТ.

Предоставляет клиента с подписью запросов, кэшированием токена
и повтором POST-запросов при 401 ошибке.

Пример использования:
    from openapi_kkt import get_openapi_config, OpenApiClient

    config = get_openapi_config()
    with OpenApiClient.from_config(config) as client:
        # Состояние системы
        state = client.get_state_system()

        # Смена и чеки
        client.open_shift("Кассир")
        result = client.print_check(check)
        status = client.data_command_id(result["command_id"])
"""

from openapi_kkt.api_client import (
    ApiCredentials,
    OpenApiClient,
)
from openapi_kkt.cache import (
    FileCache,
    InMemoryCache,
    TokenCache,
)
from openapi_kkt.config_reader import (
    OpenApiConfig,
    get_config,
    get_openapi_config,
    parse_config_file,
)
from openapi_kkt.exceptions import (
    OpenApiAuthException,
    OpenApiException,
    OpenApiProtocolException,
    OpenApiServerException,
)
from openapi_kkt.signer import RequestSigner
from openapi_kkt.token_manager import TokenManager
from openapi_kkt.transport import HttpTransport, create_http_client

__all__ = [
    # API Client
    "ApiCredentials",
    "OpenApiClient",
    # Token Cache
    "FileCache",
    "InMemoryCache",
    "TokenCache",
    # Configuration
    "OpenApiConfig",
    "get_config",
    "get_openapi_config",
    "parse_config_file",
    # Exceptions
    "OpenApiAuthException",
    "OpenApiException",
    "OpenApiProtocolException",
    "OpenApiServerException",
    # Signing
    "RequestSigner",
    # Token Management
    "TokenManager",
    # Transport
    "HttpTransport",
    "create_http_client",
]
