"""Менеджер токенов для Open API.

Управляет получением и обновлением токена авторизации.
Токен сначала ищется в кэше, обновляется только при 401 ошибке,
каждое обновление записывается обратно в кэш.
"""

import logging
import threading
from collections.abc import Callable

from openapi_kkt.cache import TokenCache

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)


class TokenManager:
    """Хранитель текущего токена и его копии в кэше.

    Срок действия токена локально не отслеживается, об истечении
    сообщает сервер кодом 401. Если токен уже обновлён другим потоком,
    повторное обновление пропускается по номеру версии.
    """

    def __init__(
        self,
        cache: TokenCache,
        cache_key: str,
        fetch_token: Callable[[], str],
    ) -> None:
        """Инициализация менеджера токенов.

        Args:
            cache: Key-value кэш для хранения токена
            cache_key: Ключ токена в кэше
            fetch_token: Функция запроса нового токена у API
        """
        self._cache = cache
        self._cache_key = cache_key
        self._fetch_token = fetch_token
        self._token: str | None = None
        self._token_version: int = 0
        self._lock = threading.Lock()

    @property
    def token(self) -> str | None:
        """Текущий токен."""
        return self._token

    @property
    def version(self) -> int:
        """Номер версии токена, растёт при каждом обновлении."""
        return self._token_version

    def load(self) -> str:
        """Получить токен: из памяти, из кэша или запросом к API.

        Returns:
            Текущий токен
        """
        with self._lock:
            if self._token is not None:
                return self._token

            if self._cache.has(self._cache_key):
                self._token = self._cache.get(self._cache_key)
                logger.debug("Токен загружен из кэша по ключу '%s'", self._cache_key)
                return self._token

            return self._refresh_locked()

    def refresh(self, stale_version: int | None = None) -> str:
        """Запросить новый токен и сохранить его в кэш.

        Args:
            stale_version: Версия токена, с которой был получен 401.
                Если токен уже обновлён после неё, запрос не выполняется.

        Returns:
            Актуальный токен
        """
        with self._lock:
            if (
                stale_version is not None
                and self._token is not None
                and self._token_version != stale_version
            ):
                logger.debug(
                    "Токен уже обновлён: %d -> %d",
                    stale_version,
                    self._token_version,
                )
                return self._token
            return self._refresh_locked()

    def _refresh_locked(self) -> str:
        token = self._fetch_token()
        self._token = token
        self._token_version += 1
        self._cache.set(self._cache_key, token)
        logger.info(
            "Токен обновлён для ключа '%s' (версия: %d)",
            self._cache_key,
            self._token_version,
        )
        return token
