from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class RequestSpec:
    """
    Назначение/ответственность:
        Описывает один API-вызов без привязки к HTTP-клиенту.
    Инварианты/гарантии:
        - method хранится в верхнем регистре.
        - path задан относительно корня API и начинается с "/".
        - srcFile: путь к файлу с телом; None означает "тело из stdin" для методов с телом.
    Взаимодействия:
        Передаётся в RequestExecutorProtocol.execute().
    """

    method: str
    path: str
    srcFile: str | None = None
    query: dict[str, str] | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not self.path.startswith("/"):
            self.path = "/" + self.path

    @classmethod
    def get(cls, path: str, *, query: dict[str, str] | None = None) -> "RequestSpec":
        return cls(method="GET", path=path, query=query)

    @classmethod
    def delete(cls, path: str) -> "RequestSpec":
        return cls(method="DELETE", path=path)

    @classmethod
    def put(cls, path: str, srcFile: str | None = None) -> "RequestSpec":
        return cls(method="PUT", path=path, srcFile=srcFile)

    @classmethod
    def post(cls, path: str, srcFile: str | None = None) -> "RequestSpec":
        return cls(method="POST", path=path, srcFile=srcFile)

    @classmethod
    def patch(cls, path: str, srcFile: str | None = None) -> "RequestSpec":
        return cls(method="PATCH", path=path, srcFile=srcFile)


@dataclass
class ApiResponse:
    """
    Назначение/ответственность:
        Полученный HTTP-ответ: статус и (необязательное) тело.
    Взаимодействия:
        Потребляется один раз форматтером или экспортёром отчёта.
    """

    status_code: int
    body: bytes | None = None
    attempts: int = 1


class RequestExecutorProtocol(Protocol):
    """
    Назначение/ответственность:
        Порт выполнения API-вызовов по RequestSpec.
    Ограничения:
        Синхронное выполнение, один запрос в полёте.
    """

    def execute(self, request: RequestSpec) -> ApiResponse:
        """
        Контракт (вход/выход):
            - Вход: RequestSpec.
            - Выход: ApiResponse с любым HTTP-статусом (4xx/5xx не являются исключениями).
        Ошибки/исключения:
            ApiUnreachableError, если ответ не получен; ошибки источника тела запроса.
        """
        ...


__all__ = ["ApiResponse", "RequestExecutorProtocol", "RequestSpec"]
