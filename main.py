"""Пример использования Open API клиента."""

import logging

from openapi_kkt import OpenApiClient, get_openapi_config

# Настраиваем логирование
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def main() -> None:
    """Основная функция."""
    # Загружаем конфигурацию из config.yml
    config = get_openapi_config()
    print(f"Подключение к аккаунту: {config.account}")

    with OpenApiClient.from_config(config) as client:
        state = client.get_state_system()
        print(f"\nСостояние системы: {state}")

        result = client.open_shift("Кассир")
        print(f"Открытие смены: {result}")

        command_id = result.get("command_id")
        if command_id:
            print(f"Статус команды: {client.data_command_id(command_id)}")

    print("\nСоединения закрыты.")


if __name__ == "__main__":
    main()
