"""Настройки интеграции с Open API ККТ.

URL аккаунта, app_id и secret хранятся в секции openapi YAML-файла.
Путь к файлу задаёт OPENAPI_KKT_CONFIG, её можно положить в .env.
"""

from functools import lru_cache
from os import getenv
from typing import Any, TypeVar, cast

from dotenv import load_dotenv
from pydantic import BaseModel, SecretStr
from yaml import CSafeLoader as SafeLoader
from yaml import load

# Автоматически загружаем переменные из .env файла
load_dotenv()

ConfigType = TypeVar("ConfigType", bound=BaseModel)


class OpenApiConfig(BaseModel):
    """Конфигурация для подключения к Open API."""

    # URL аккаунта (например: https://example.ru/open_api/)
    account: str

    # app_id интеграции
    app_id: str

    # Secret key интеграции
    secret: SecretStr

    # Каталог файлового кэша токена (по умолчанию во временном каталоге)
    cache_dir: str | None = None

    # Таймаут HTTP-запросов, секунд
    timeout: float = 30.0

    # Алгоритм подписи запросов
    digest_algorithm: str = "md5"


@lru_cache
def parse_config_file() -> dict[str, Any]:
    """Загрузить YAML-файл с настройками интеграции.

    Результат кэшируется на процесс: файл читается один раз,
    даже если клиентов ККТ создаётся несколько.

    Returns:
        Содержимое файла: секции верхнего уровня по именам

    Raises:
        ValueError: Если OPENAPI_KKT_CONFIG не задана или файл не словарь
        FileNotFoundError: Если файл не найден
    """
    file_path = getenv("OPENAPI_KKT_CONFIG")
    if file_path is None:
        raise ValueError(
            "Не задан путь к настройкам Open API: "
            "укажите YAML-файл в OPENAPI_KKT_CONFIG."
        )

    with open(file_path, "rb") as file:
        config_data = load(file, Loader=SafeLoader)

    if not isinstance(config_data, dict):
        raise ValueError("Файл настроек Open API должен содержать словарь секций")
    return config_data


@lru_cache
def get_config(model: type[ConfigType], root_key: str) -> ConfigType:  # noqa: UP047
    """Провалидировать секцию файла настроек pydantic-моделью.

    Args:
        model: Модель секции, например OpenApiConfig
        root_key: Имя секции, для Open API это openapi

    Returns:
        Провалидированные настройки секции

    Raises:
        ValueError: Если секции нет в файле
    """
    config_dict = parse_config_file()
    if root_key not in config_dict:
        raise ValueError(f"В файле настроек нет секции '{root_key}'")
    return model.model_validate(config_dict[root_key])


def get_openapi_config() -> OpenApiConfig:
    """Получить конфигурацию Open API из секции openapi."""
    return cast(OpenApiConfig, get_config(OpenApiConfig, "openapi"))
