from __future__ import annotations

from elscli.domain.ports.secrets import PasswordProviderProtocol


class StaticPasswordProvider(PasswordProviderProtocol):
    """
    Назначение:
        Провайдер заранее заданного пароля (скрипты, тесты).
    """

    def __init__(self, password: str | None):
        self._password = password

    def get_password(self) -> str | None:
        return self._password or None
