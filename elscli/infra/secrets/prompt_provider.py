from __future__ import annotations

import getpass
import sys
from typing import IO, Any

from elscli.domain.ports.secrets import PasswordProviderProtocol


class PromptPasswordProvider(PasswordProviderProtocol):
    """
    Назначение:
        Интерактивный скрытый ввод пароля (getpass).
    Ограничения:
        - Требует TTY.
        - Не подходит для автоматических сценариев.
    """

    def __init__(self, stream: IO[Any] | None = None, prompt: str = "Enter password: "):
        self._stream = stream
        self._prompt = prompt

    def get_password(self) -> str | None:
        try:
            value = getpass.getpass(self._prompt, stream=self._stream or sys.stdout)
        except EOFError:
            return None
        return value or None
