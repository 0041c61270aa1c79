"""Фасад Open API ККТ с подписью запросов и обновлением токена при 401.

Клиент синхронный и рассчитан на владение одним потоком: nonce сессии
общий для всех вызовов, а состояние токена защищено блокировкой
в TokenManager.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx

from openapi_kkt.cache import FileCache, TokenCache
from openapi_kkt.config_reader import OpenApiConfig
from openapi_kkt.exceptions import (
    OpenApiAuthException,
    OpenApiProtocolException,
    OpenApiServerException,
)
from openapi_kkt.signer import (
    DEFAULT_DIGEST_ALGORITHM,
    RequestSigner,
    encode_json,
    make_nonce,
)
from openapi_kkt.token_manager import TokenManager
from openapi_kkt.transport import DEFAULT_TIMEOUT, HttpTransport, create_http_client

default_logger = logging.getLogger(__name__)
default_logger.setLevel(level=logging.DEBUG)

# Коды, после которых тело ответа возвращается вызывающему коду
SUCCESS_STATUSES = frozenset({200, 400, 422})

TOKEN_CACHE_PREFIX = "OpenApiToken "


@dataclass(frozen=True)
class ApiCredentials:
    """Учетные данные интеграции Open API.

    Attributes:
        account: URL аккаунта
        app_id: app_id интеграции
        secret: Secret key интеграции
    """

    account: str
    app_id: str
    secret: str = field(repr=False)

    @property
    def cache_key(self) -> str:
        """Ключ токена в кэше."""
        return TOKEN_CACHE_PREFIX + self.app_id


class OpenApiClient:
    """Клиент Open API для управления ККТ.

    Содержит: HTTP-клиент, RequestSigner, TokenManager.
    Предоставляет методы для смен, печати чеков и запроса статуса команд.

    Использование:
        with OpenApiClient(account, app_id, secret) as client:
            state = client.get_state_system()
            result = client.open_shift("Кассир")
    """

    def __init__(
        self,
        account: str,
        app_id: str,
        secret: str,
        http_client: HttpTransport | None = None,
        cache: TokenCache | None = None,
        logger: logging.Logger | None = None,
        digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Инициализация клиента и загрузка токена.

        Args:
            account: URL аккаунта
            app_id: app_id интеграции
            secret: Secret key интеграции
            http_client: HTTP-клиент (по умолчанию HTTP/2 httpx.Client)
            cache: Кэш токена (по умолчанию FileCache)
            logger: Логгер для ошибок API (по умолчанию логгер модуля)
            digest_algorithm: Алгоритм подписи запросов
            timeout: Таймаут HTTP-клиента по умолчанию, секунд

        Raises:
            OpenApiAuthException: Если токен не удалось получить
        """
        self._credentials = ApiCredentials(account=account, app_id=app_id, secret=secret)
        self._nonce = make_nonce()
        self._logger = logger if logger is not None else default_logger
        self._signer = RequestSigner(secret, algorithm=digest_algorithm)

        self._owns_http_client = http_client is None
        self._http_client: HttpTransport = http_client or create_http_client(
            account, timeout=timeout
        )

        self._token_manager = TokenManager(
            cache=cache if cache is not None else FileCache(),
            cache_key=self._credentials.cache_key,
            fetch_token=self._fetch_token,
        )
        try:
            self._token_manager.load()
        except BaseException:
            self.close()
            raise
        self._logger.debug("Создан OpenApiClient для app_id=%s", app_id)

    @classmethod
    def from_config(
        cls, config: OpenApiConfig, logger: logging.Logger | None = None
    ) -> "OpenApiClient":
        """Создать клиента из конфигурации Open API.

        Args:
            config: Конфигурация из YAML-файла
            logger: Логгер для ошибок API

        Returns:
            Экземпляр OpenApiClient
        """
        return cls(
            account=config.account,
            app_id=config.app_id,
            secret=config.secret.get_secret_value(),
            cache=FileCache(config.cache_dir),
            logger=logger,
            digest_algorithm=config.digest_algorithm,
            timeout=config.timeout,
        )

    @property
    def credentials(self) -> ApiCredentials:
        return self._credentials

    @property
    def nonce(self) -> str:
        return self._nonce

    @property
    def token(self) -> str | None:
        return self._token_manager.token

    def close(self) -> None:
        """Закрыть HTTP-клиент, если он создан этим экземпляром."""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> "OpenApiClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ========== Диспетчер запросов ==========

    def _url(self, resource: str) -> str:
        return self._credentials.account + resource

    def _send_get(self, resource: str, params: Mapping[str, Any]) -> httpx.Response:
        return self._http_client.request(
            "GET",
            self._url(resource),
            headers={"sign": self._signer.sign(params)},
            params=params,
        )

    def _post_request(self, resource: str, params: Mapping[str, Any]) -> httpx.Response:
        return self._http_client.request(
            "POST",
            self._url(resource),
            headers={"sign": self._signer.sign(params)},
            content=encode_json(params).encode("utf-8"),
        )

    def _get(self, resource: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """Выполнить подписанный GET-запрос.

        При 401 токен обновляется, но запрос не повторяется:
        возвращается тело ответа 401.
        """
        token_version = self._token_manager.version
        response = self._send_get(resource, params)
        self._check_status(response, token_version)
        return response.json()

    def _post(self, resource: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """Выполнить подписанный POST-запрос с одним повтором при 401.

        Повтор отправляется с обновлённым токеном и новой подписью;
        его ответ возвращается при любом коде статуса.
        """
        token_version = self._token_manager.version
        response = self._post_request(resource, params)
        self._check_status(response, token_version)

        if response.status_code == 401:
            params = {**params, "token": self._token_manager.token}
            response = self._post_request(resource, params)
            if response.status_code not in SUCCESS_STATUSES:
                self._logger.warning(
                    "Повторный запрос %s после обновления токена вернул %d",
                    resource,
                    response.status_code,
                )

        return response.json()

    def _check_status(self, response: httpx.Response, token_version: int | None = None) -> None:
        """Разобрать код статуса ответа.

        Args:
            response: Ответ API
            token_version: Версия токена, с которой был отправлен запрос

        Raises:
            OpenApiServerException: При 500
            OpenApiProtocolException: При любом неожиданном коде
        """
        status_code = response.status_code
        if status_code in SUCCESS_STATUSES:
            return

        if status_code == 401:
            self._logger.debug(
                "Токен просрочен. status_code=%d response=%s",
                status_code,
                _response_context(response),
            )
            self._token_manager.refresh(stale_version=token_version)
            return

        if status_code == 500:
            self._logger.critical(
                "SDK. Ошибка Open Api. 500 Internal Server Error: %s",
                _response_context(response),
            )
            raise OpenApiServerException(response)

        self._logger.error(
            "SDK. Ошибка Open Api. status_code=%d response=%s",
            status_code,
            _response_context(response),
        )
        raise OpenApiProtocolException(response.text, status_code)

    def _fetch_token(self) -> str:
        """Получить новый токен от API.

        Returns:
            Новый токен

        Raises:
            OpenApiAuthException: При 401 или ответе без токена
        """
        params = {
            "app_id": self._credentials.app_id,
            "nonce": self._nonce,
        }
        self._logger.debug("Запрос токена для app_id=%s", self._credentials.app_id)
        response = self._send_get("Token", params)

        if response.status_code == 401:
            self._logger.error(
                "Некорректные учетные данные для app_id=%s: получен 401 на запрос токена",
                self._credentials.app_id,
            )
            raise OpenApiAuthException(
                "Некорректные учетные данные: получен 401 на запрос токена"
            )
        self._check_status(response)

        body = response.json()
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            self._logger.error("В ответе на запрос токена нет поля token: %s", body)
            raise OpenApiAuthException(f"В ответе на запрос токена нет поля token: {body}")
        return token

    # ========== Операции ККТ ==========

    def get_state_system(self) -> dict[str, Any]:
        """Получить информацию о состоянии системы.

        Returns:
            Ответ о состоянии системы
        """
        return self._get(
            "StateSystem",
            {
                "app_id": self._credentials.app_id,
                "nonce": self._nonce,
                "token": self._token_manager.token,
            },
        )

    def open_shift(self, command_name: str = "name") -> dict[str, Any]:
        """Открыть смену на ККТ.

        Args:
            command_name: Имя автора команды (поле author)

        Returns:
            Ответ открытия смены
        """
        return self._post("Command", self._shift_params("openShift", command_name))

    def close_shift(self, command_name: str = "name") -> dict[str, Any]:
        """Закрыть смену на ККТ.

        Args:
            command_name: Имя автора команды (поле author)

        Returns:
            Ответ закрытия смены
        """
        return self._post("Command", self._shift_params("closeShift", command_name))

    def print_check(self, command: Mapping[str, Any]) -> dict[str, Any]:
        """Напечатать чек прихода на ККТ.

        Args:
            command: Параметры чека

        Returns:
            Ответ с command_id
        """
        return self._post("Command", self._command_params("printCheck", command))

    def print_purchase_return(self, command: Mapping[str, Any]) -> dict[str, Any]:
        """Напечатать чек возврата прихода на ККТ.

        Args:
            command: Параметры чека

        Returns:
            Ответ с command_id
        """
        return self._post("Command", self._command_params("printPurchaseReturn", command))

    def data_command_id(self, command_id: str) -> dict[str, Any]:
        """Получить информацию о команде ФР.

        Для этого запроса nonce генерируется заново.

        Args:
            command_id: command_id чека

        Returns:
            Данные по command_id
        """
        return self._get(
            f"Command/{command_id}",
            {
                "nonce": make_nonce(),
                "token": self._token_manager.token,
                "app_id": self._credentials.app_id,
            },
        )

    def _shift_params(self, command_type: str, command_name: str) -> dict[str, Any]:
        return self._command_params(
            command_type, {"report_type": "false", "author": command_name}
        )

    def _command_params(self, command_type: str, command: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "app_id": self._credentials.app_id,
            "command": dict(command),
            "nonce": self._nonce,
            "token": self._token_manager.token,
            "type": command_type,
        }


def _response_context(response: httpx.Response) -> Any:
    """Тело ответа для лога: JSON или текст, если JSON не разбирается."""
    try:
        return response.json()
    except ValueError:
        return response.text
