from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Callable, Generator

import httpx

from elscli.config import AccessKey
from elscli.errors import MissingAccessKeyError

AUTH_SCHEME = "ELS"
DATE_HEADER = "X-Els-Date"
REQUIRED_CONTENT_TYPE = "application/json; charset=utf-8"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def buildStringToSign(method: str, path: str, query: str, contentSha256: str, contentType: str, date: str) -> str:
    """
    Строка для подписи: метод, путь, query, sha256 тела, Content-Type и дата, по одной на строку.
    """
    return "\n".join([method.upper(), path, query, contentSha256, contentType, date])


class ElsRequestSigner(httpx.Auth):
    """
    Назначение/ответственность:
        Подписывает каждый запрос к ELS API ключом доступа профиля (HMAC-SHA256).
    Инварианты/гарантии:
        - Выставляет заголовки X-Els-Date, Content-Type и Authorization.
        - Без ключа доступа запрос не отправляется (MissingAccessKeyError).
    """

    requires_request_body = True

    def __init__(self, accessKey: AccessKey | None, clock: Callable[[], datetime] = _utcnow):
        self._accessKey = accessKey
        self._clock = clock

    def sign(self, request: httpx.Request) -> None:
        key = self._accessKey
        if key is None or not key.id or not key.secretAccessKey:
            raise MissingAccessKeyError()

        date = self._clock().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = request.content or b""
        contentSha256 = hashlib.sha256(body).hexdigest()

        request.headers["Content-Type"] = REQUIRED_CONTENT_TYPE
        request.headers[DATE_HEADER] = date

        stringToSign = buildStringToSign(
            method=request.method,
            path=request.url.path,
            query=request.url.query.decode("ascii"),
            contentSha256=contentSha256,
            contentType=REQUIRED_CONTENT_TYPE,
            date=date,
        )
        digest = hmac.new(
            key.secretAccessKey.encode("utf-8"),
            stringToSign.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        signature = base64.b64encode(digest).decode("ascii")
        request.headers["Authorization"] = f"{AUTH_SCHEME} {key.id}:{signature}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self.sign(request)
        yield request
