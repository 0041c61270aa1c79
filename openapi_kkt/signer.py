"""Подпись запросов к Open API.

Подпись — hex-дайджест канонического JSON параметров, склеенного
с секретным ключом интеграции. Формат сериализации повторяет
json_encode(..., JSON_UNESCAPED_UNICODE) на стороне сервера:
компактный JSON, кириллица без экранирования, слеш и U+2028/U+2029
экранируются, пустой словарь становится пустым массивом [].
"""

import hashlib
import json
import time
from collections.abc import Mapping
from typing import Any

DEFAULT_DIGEST_ALGORITHM = "md5"


def encode_json(value: Any) -> str:
    """Сериализовать значение в компактный JSON.

    Не добавлять indent — подпись считается по строке без пробелов.

    Args:
        value: JSON-сериализуемое значение

    Returns:
        Строка JSON
    """
    encoded = json.dumps(_php_arrays(value), ensure_ascii=False, separators=(",", ":"))
    # Вне строк эти символы в JSON не встречаются
    return (
        encoded.replace("/", "\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _php_arrays(value: Any) -> Any:
    """Пустые словари сериализуются как [], как PHP-массивы."""
    if isinstance(value, Mapping):
        if not value:
            return []
        return {key: _php_arrays(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_php_arrays(item) for item in value]
    return value


def canonical_json(params: Mapping[str, Any]) -> str:
    """Канонический JSON параметров: ключи верхнего уровня по возрастанию.

    Вложенные словари (например command) сохраняют исходный порядок ключей.
    """
    return encode_json(dict(sorted(params.items())))


def make_nonce() -> str:
    """Сгенерировать nonce из текущего времени, например nonce_17291234567891."""
    return "nonce_" + str(time.time()).replace(".", "")


class RequestSigner:
    """Генератор подписи запросов.

    Алгоритм дайджеста — часть протокола с сервером, по умолчанию md5.
    """

    def __init__(
        self, secret: str, algorithm: str = DEFAULT_DIGEST_ALGORITHM
    ) -> None:
        """Инициализация.

        Args:
            secret: Secret key интеграции
            algorithm: Имя алгоритма из hashlib

        Raises:
            ValueError: Если алгоритм не поддерживается hashlib
        """
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Неподдерживаемый алгоритм подписи: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def sign(self, params: Mapping[str, Any]) -> str:
        """Подписать набор параметров запроса.

        Args:
            params: Параметры запроса (query или тело)

        Returns:
            Подпись в hex формате
        """
        payload = canonical_json(params) + self._secret
        return hashlib.new(self._algorithm, payload.encode("utf-8")).hexdigest()
