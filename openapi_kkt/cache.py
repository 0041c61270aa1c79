"""Хранилища для кэширования токена Open API.

Токен хранится под ключом "OpenApiToken <app_id>" и переживает
перезапуск процесса, если используется FileCache.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "openapi_kkt"


class TokenCache(Protocol):
    """Минимальный интерфейс key-value кэша."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryCache:
    """Кэш в памяти процесса. Не переживает перезапуск."""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}

    def has(self, key: str) -> bool:
        return key in self._store

    def get(self, key: str) -> Any:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value


class FileCache:
    """Файловый кэш: один JSON-файл на ключ.

    Имя файла — sha1 от ключа, так как ключи содержат пробелы.
    Запись атомарна: сначала во временный файл, затем os.replace.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self._directory = Path(directory) if directory else DEFAULT_CACHE_DIR

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self._directory / f"{digest}.json"

    def has(self, key: str) -> bool:
        return self._path(key).is_file()

    def get(self, key: str) -> Any:
        """Прочитать значение по ключу.

        Returns:
            Сохранённое значение или None, если ключа нет
        """
        path = self._path(key)
        if not path.is_file():
            return None
        with open(path, encoding="utf-8") as file:
            return json.load(file)["value"]

    def set(self, key: str, value: Any) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                json.dump({"key": key, "value": value}, file, ensure_ascii=False)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug("Значение сохранено в кэш: %s", self._path(key))
