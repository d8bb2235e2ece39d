from __future__ import annotations

from elscli.domain.ports.execution import ApiResponse, RequestExecutorProtocol, RequestSpec
from elscli.errors import NoContentProvidedError
from elscli.infra.http.els_client import ElsApiClient
from elscli.infra.sources.input_resolver import InputResolver

BODY_REQUIRED_METHODS = ("POST", "PUT")
BODY_OPTIONAL_METHODS = ("PATCH",)


class ElsRequestExecutor(RequestExecutorProtocol):
    """
    Назначение/ответственность:
        Адаптер RequestExecutorProtocol поверх ElsApiClient.
        Подбирает тело запроса по методу и выполняет подписанный вызов.
    Ограничения:
        - Синхронное выполнение; повторы при 429 выполняет сам клиент.
        - HTTP-статусы ошибок не превращаются в исключения.
    """

    def __init__(self, client: ElsApiClient, inputResolver: InputResolver | None = None):
        self._client = client
        self._inputResolver = inputResolver or InputResolver()

    def execute(self, request: RequestSpec) -> ApiResponse:
        """
        Контракт (вход/выход):
            Вход: RequestSpec.
            Выход: ApiResponse (последний ответ, если попытки исчерпаны на 429).
        Алгоритм:
            - POST/PUT: тело обязательно (файл или pipe).
            - PATCH: отсутствие тела допустимо, некоторые вызовы ELS принимают пустой PATCH.
            - Остальные методы отправляются без тела.
        """
        content = self._resolveBody(request)
        return self._client.send(
            method=request.method,
            path=request.path,
            content=content,
            params=request.query,
        )

    def _resolveBody(self, request: RequestSpec) -> bytes | None:
        if request.method in BODY_REQUIRED_METHODS:
            return self._inputResolver.resolve(request.srcFile)
        if request.method in BODY_OPTIONAL_METHODS:
            try:
                return self._inputResolver.resolve(request.srcFile)
            except NoContentProvidedError:
                return None
        return None
