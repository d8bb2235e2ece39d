from __future__ import annotations

from typing import Protocol


class PasswordProviderProtocol(Protocol):
    """
    Назначение:
        Порт получения пароля пользователя (для создания ключа доступа).
    Ограничения:
        Не знает об источнике (скрытый ввод в терминале, заранее заданная строка).
    """

    def get_password(self) -> str | None:
        """
        Контракт (вход/выход):
            - Выход: пароль без завершающего перевода строки или None, если ввод недоступен.
        """
        ...


__all__ = ["PasswordProviderProtocol"]
