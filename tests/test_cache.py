"""Тесты для cache модуля."""

from pathlib import Path

import pytest

from openapi_kkt.cache import DEFAULT_CACHE_DIR, FileCache, InMemoryCache

# Маркируем все тесты в этом модуле как unit-тесты
pytestmark = pytest.mark.unit


class TestInMemoryCache:
    """Тесты InMemoryCache."""

    def test_set_and_get(self) -> None:
        cache = InMemoryCache()
        cache.set("OpenApiToken 1", "token")

        assert cache.has("OpenApiToken 1")
        assert cache.get("OpenApiToken 1") == "token"

    def test_missing_key(self) -> None:
        cache = InMemoryCache()

        assert not cache.has("missing")
        assert cache.get("missing") is None


class TestFileCache:
    """Тесты FileCache."""

    def test_default_directory(self) -> None:
        """По умолчанию используется каталог во временной папке."""
        assert FileCache().directory == DEFAULT_CACHE_DIR

    def test_set_and_get(self, tmp_path: Path) -> None:
        """Значение сохраняется и читается по ключу с пробелом."""
        cache = FileCache(tmp_path)
        cache.set("OpenApiToken app-1", "токен")

        assert cache.has("OpenApiToken app-1")
        assert cache.get("OpenApiToken app-1") == "токен"

    def test_missing_key(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path)

        assert not cache.has("OpenApiToken app-1")
        assert cache.get("OpenApiToken app-1") is None

    def test_overwrite(self, tmp_path: Path) -> None:
        """Повторная запись заменяет значение."""
        cache = FileCache(tmp_path)
        cache.set("key", "old")
        cache.set("key", "new")

        assert cache.get("key") == "new"

    def test_persists_between_instances(self, tmp_path: Path) -> None:
        """Значение доступно новому экземпляру с тем же каталогом."""
        FileCache(tmp_path).set("key", "value")

        assert FileCache(tmp_path).get("key") == "value"

    def test_creates_directory(self, tmp_path: Path) -> None:
        """Каталог кэша создаётся при первой записи."""
        directory = tmp_path / "nested" / "cache"
        FileCache(directory).set("key", "value")

        assert directory.is_dir()

    def test_no_temporary_files_left(self, tmp_path: Path) -> None:
        """После записи остаётся только файл значения."""
        cache = FileCache(tmp_path)
        cache.set("key", "value")

        files = list(tmp_path.iterdir())
        assert len(files) == 1
        assert files[0].suffix == ".json"

    def test_different_keys_different_files(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path)
        cache.set("OpenApiToken 1", "a")
        cache.set("OpenApiToken 2", "b")

        assert cache.get("OpenApiToken 1") == "a"
        assert cache.get("OpenApiToken 2") == "b"
