from __future__ import annotations

import sys
from pathlib import Path
from typing import IO, Any

from elscli.errors import NoContentProvidedError


class InputResolver:
    """
    Назначение/ответственность:
        Определяет источник тела запроса: явный файл или данные, переданные через pipe.
    Ограничения:
        - stdin читается целиком; интерактивный терминал не считается источником данных.
        - Если stdin не передан явно, берётся текущий sys.stdin в момент вызова.
    """

    def __init__(self, stdin: IO[Any] | None = None):
        self._stdin = stdin

    def resolve(self, srcFile: str | None) -> bytes:
        """
        Контракт (вход/выход):
            Вход: путь к файлу или None.
            Выход: байты тела запроса.
        Ошибки/исключения:
            - OSError (FileNotFoundError и т.п.), если файл недоступен.
            - NoContentProvidedError, если файл не задан и в stdin ничего не передано.
        """
        if srcFile:
            return Path(srcFile).read_bytes()
        return self._readPipe()

    def _readPipe(self) -> bytes:
        stream = self._stdin if self._stdin is not None else sys.stdin
        if stream is None:
            raise NoContentProvidedError()
        isatty = getattr(stream, "isatty", None)
        if isatty is not None and isatty():
            raise NoContentProvidedError()

        data = getattr(stream, "buffer", stream).read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data:
            raise NoContentProvidedError()
        return data
