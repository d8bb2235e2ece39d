from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from elscli.domain.error_codes import ErrorCode


@dataclass
class AppError(Exception):
    """
    Унифицированная ошибка приложения.
    """

    category: str
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # ErrorCode -> обычная строка, чтобы код одинаково выглядел в логе и to_dict()
        self.code = getattr(self.code, "value", self.code)
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }


class NoContentProvidedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            category="input",
            code=ErrorCode.NO_CONTENT,
            message="No Content Provided - either provide a filename or pipe content to the command",
        )


class ApiUnreachableError(AppError):
    def __init__(self, method: str | None = None, path: str | None = None, reason: str | None = None):
        """
        Назначение:
            Ответ от API не получен вовсе (сеть, DNS, TLS, таймаут).
        """
        super().__init__(
            category="api",
            code=ErrorCode.API_UNREACHABLE,
            message=(
                "The ELS API could not be reached. Are you connected to the internet? "
                "Have you used the correct profile?"
            ),
            details={"method": method, "path": path, "reason": reason},
        )


class UnexpectedResponseError(AppError):
    def __init__(self, status_code: int | None, message: str = "Unexpected Response"):
        super().__init__(
            category="api",
            code=ErrorCode.UNEXPECTED_RESPONSE,
            message=message,
            details={"status_code": status_code},
        )
        self.status_code = status_code


class ResponseDecodeError(AppError):
    def __init__(self, reason: str):
        super().__init__(
            category="api",
            code=ErrorCode.DECODE_ERROR,
            message=f"Could not decode response body: {reason}",
        )


class InvalidOutputError(AppError):
    def __init__(self, value: str):
        super().__init__(
            category="config",
            code=ErrorCode.INVALID_OUTPUT,
            message=f"Invalid output specified: {value} (must be wholeResponse|bodyOnly|statusCodeOnly)",
            details={"output": value},
        )


class ProfileNotFoundError(AppError):
    def __init__(self, profile_name: str):
        super().__init__(
            category="config",
            code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_name}",
            details={"profile": profile_name},
        )


class ConfigError(AppError):
    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            category="config",
            code=ErrorCode.INVALID_CONFIG,
            message=message,
            details={"path": path},
        )


class MissingAccessKeyError(AppError):
    def __init__(self) -> None:
        super().__init__(
            category="config",
            code=ErrorCode.NO_ACCESS_KEY,
            message="No access key is configured for the selected profile",
        )


class PasswordRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            category="input",
            code=ErrorCode.PASSWORD_REQUIRED,
            message="A password is required to create an access key",
        )


__all__ = [
    "AppError",
    "ApiUnreachableError",
    "ConfigError",
    "InvalidOutputError",
    "MissingAccessKeyError",
    "NoContentProvidedError",
    "PasswordRequiredError",
    "ProfileNotFoundError",
    "ResponseDecodeError",
    "UnexpectedResponseError",
]
