from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from elscli.common.sanitize import bodySnippet
from elscli.domain.ports.execution import ApiResponse
from elscli.errors import ApiUnreachableError
from elscli.loggingSetup import logEvent

THROTTLED_STATUS = 429
API_RETRY_INTERVAL_SECONDS = 0.5


class ElsApiClient:
    def __init__(
        self,
        baseUrl: str,
        signer: httpx.Auth | None = None,
        maxTries: int = 2,
        retryIntervalSeconds: float = API_RETRY_INTERVAL_SECONDS,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        runId: str = "-",
    ):
        """
        Назначение:
            Клиент ELS API: подпись запросов и повтор только при троттлинге (429).
        Контракт:
            - maxTries >= 1: общее число попыток на один вызов.
            - Ответ с любым другим статусом (включая 5xx) возвращается сразу.
            - Отсутствие ответа (сеть/таймаут): ApiUnreachableError без повторов.
        """
        self.baseUrl = baseUrl.rstrip("/")
        self.maxTries = max(1, maxTries)
        self.retryIntervalSeconds = retryIntervalSeconds
        self.retry_attempts = 0
        self.logger = logger
        self.runId = runId

        self.client = httpx.Client(
            base_url=self.baseUrl,
            auth=signer,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ElsApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def getRetryAttempts(self) -> int:
        """Возвращает количество выполненных повторных попыток."""
        return self.retry_attempts

    def _log(self, level: int, message: str) -> None:
        if self.logger is not None:
            logEvent(self.logger, level, self.runId, "api", message)

    def _tryRequest(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Одна попытка вызова; сетевые ошибки превращаются в ApiUnreachableError."""
        try:
            return self.client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            self._log(logging.DEBUG, f"Could not access API method={method} path={path} err={exc!r}")
            raise ApiUnreachableError(method=method, path=path, reason=str(exc)) from exc

    def _requestWithRetry(self, method: str, path: str, **kwargs: Any) -> tuple[httpx.Response, int]:
        attempt = 0
        while True:
            attempt += 1
            resp = self._tryRequest(method, path, **kwargs)
            self._log(
                logging.DEBUG,
                f"api call method={method} path={path} status={resp.status_code} attempt={attempt}/{self.maxTries}",
            )
            if resp.status_code != THROTTLED_STATUS or attempt >= self.maxTries:
                return resp, attempt
            self.retry_attempts += 1
            if self.retryIntervalSeconds > 0:
                time.sleep(self.retryIntervalSeconds)

    def send(
        self,
        method: str,
        path: str,
        content: bytes | None = None,
        params: dict[str, str] | None = None,
    ) -> ApiResponse:
        """
        Назначение:
            Подписанный запрос, возвращающий статус и тело без исключений по статусу.
        """
        resp, attempts = self._requestWithRetry(method, path, content=content, params=params or None)
        body = resp.content or None
        if resp.status_code >= 400:
            self._log(logging.DEBUG, f"api error status={resp.status_code} body={bodySnippet(body)}")
        return ApiResponse(status_code=resp.status_code, body=body, attempts=attempts)

    def createAccessKey(
        self,
        email: str,
        password: str,
        expiryDays: int,
        timeoutSeconds: float,
    ) -> tuple[int, Any | None]:
        """
        Назначение:
            Запрашивает новый ключ доступа пользователя по email/паролю (basic auth, без подписи).

        Возвращает кортеж: (status_code, response_json_or_None).

        timeoutSeconds ограничивает каждую фазу httpx отдельно (connect, read, write, pool),
        а не весь вызов целиком.
        """
        resp, _attempts = self._requestWithRetry(
            "POST",
            f"/users/{email}/accessKeys",
            json={"expiryDays": expiryDays},
            auth=httpx.BasicAuth(email, password),
            timeout=httpx.Timeout(timeoutSeconds),
        )
        if not resp.content:
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError:
            return resp.status_code, None
