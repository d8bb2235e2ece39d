from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import IO, Any

from elscli.common.sanitize import maskSecret
from elscli.domain.ports.secrets import PasswordProviderProtocol
from elscli.errors import PasswordRequiredError, ResponseDecodeError, UnexpectedResponseError
from elscli.infra.http.els_client import ElsApiClient
from elscli.loggingSetup import logEvent


def _expiryToRfc3339(value: Any) -> str:
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def renderProfileSnippet(email: str, keyId: str, secret: str, expiryDate: str | None) -> str:
    """TOML-фрагмент [profiles.default] для нового ключа доступа."""
    lines = [
        "[profiles.default]",
        "\t[profiles.default.accessKey]",
        f'\t\temail = "{email}"',
        f'\t\tid = "{keyId}"',
        f'\t\tsecretAccessKey = "{secret}"',
    ]
    if expiryDate:
        lines.append(f'\t\texpiryDate = "{expiryDate}"')
    return "\n".join(lines) + "\n"


class AccessKeyCreateUseCase:
    """
    Назначение/ответственность:
        Создание ключа доступа по email и паролю и печать профиля для els-cli.toml.
    Взаимодействия:
        - PasswordProviderProtocol (скрытый ввод пароля).
        - ElsApiClient.createAccessKey (basic auth, таймаут профиля).
    """

    def __init__(
        self,
        client: ElsApiClient,
        passwordProvider: PasswordProviderProtocol,
        timeoutSeconds: float,
        logger: logging.Logger | None = None,
        run_id: str = "-",
    ):
        self.client = client
        self.passwordProvider = passwordProvider
        self.timeoutSeconds = timeoutSeconds
        self.logger = logger
        self.run_id = run_id

    def create(self, email: str, expiryDays: int, stream: IO[str]) -> dict[str, Any]:
        """
        Контракт (вход/выход):
            Вход: email, срок действия в днях (0 = бессрочный), поток вывода.
            Выход: JSON созданного ключа; в stream напечатаны инструкции и профиль.
        Ошибки/исключения:
            - PasswordRequiredError, если пароль не введён.
            - UnexpectedResponseError при статусе не 2xx (для 401 дополнительно печатается подсказка).
        """
        password = self.passwordProvider.get_password()
        if not password:
            raise PasswordRequiredError()

        statusCode, data = self.client.createAccessKey(
            email=email,
            password=password,
            expiryDays=expiryDays,
            timeoutSeconds=self.timeoutSeconds,
        )

        if statusCode == 401:
            stream.write("The email address or password are incorrect.\n")
        if statusCode not in (200, 201):
            raise UnexpectedResponseError(statusCode, message=f"Request Failed: (StatusCode = {statusCode})")
        if not isinstance(data, dict) or not data.get("id") or not data.get("secretAccessKey"):
            raise ResponseDecodeError("access key response has no id/secretAccessKey")

        if self.logger is not None:
            logEvent(
                self.logger,
                logging.INFO,
                self.run_id,
                "access-keys",
                f"access key created email={email} id={data['id']} secret={maskSecret(data['secretAccessKey'])}",
            )

        stream.write("Access Key Created - shown below in a 'default' profile.\n")
        stream.write("To sign API calls made by the els-cli with this access key,\n")
        stream.write("add the profile to ~/.els/els-cli.toml .\n\n")
        expiry = _expiryToRfc3339(data.get("expiryDate")) if expiryDays > 0 else None
        stream.write(renderProfileSnippet(email, str(data["id"]), str(data["secretAccessKey"]), expiry) + "\n")
        return data


def accessKeysPath(email: str, accessKeyId: str | None = None) -> str:
    path = f"/users/{email}/accessKeys"
    if accessKeyId:
        path += f"/{accessKeyId}"
    return path
