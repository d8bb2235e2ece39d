from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from enum import Enum
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib  # type: ignore

from elscli.errors import ConfigError, InvalidOutputError, ProfileNotFoundError

DEFAULT_PROFILE_NAME = "default"
DEFAULT_MAX_API_TRIES = 2
DEFAULT_API_TIMEOUT_SECS = 30
DEFAULT_API_URL = "https://api.elasticlicensing.com/v1"


def defaultConfigPath() -> Path:
    return Path.home() / ".els" / "els-cli.toml"


class OutputMode(str, Enum):
    """
    Назначение:
        Какие части HTTP-ответа печатаются.
    """

    WHOLE_RESPONSE = "wholeResponse"
    BODY_ONLY = "bodyOnly"
    STATUS_CODE_ONLY = "statusCodeOnly"

    @classmethod
    def parse(cls, value: str) -> "OutputMode":
        for mode in cls:
            if mode.value == value:
                return mode
        raise InvalidOutputError(value)


@dataclass(frozen=True)
class AccessKey:
    id: str
    secretAccessKey: str
    email: str | None = None
    expiryDate: datetime | None = None


@dataclass(frozen=True)
class Profile:
    """
    Назначение/ответственность:
        Именованный набор умолчаний для API-вызовов.
    Инварианты/гарантии:
        - maxApiTries >= 1, apiTimeoutSecs >= 1 (нулевые/отрицательные заменяются умолчаниями).
        - Неизменяем; переопределения из CLI создают новый экземпляр.
    """

    accessKey: AccessKey | None = None
    maxApiTries: int = DEFAULT_MAX_API_TRIES
    output: OutputMode = OutputMode.WHOLE_RESPONSE
    apiTimeoutSecs: int = DEFAULT_API_TIMEOUT_SECS
    apiUrl: str = DEFAULT_API_URL

    def __post_init__(self) -> None:
        # frozen: нормализуем через object.__setattr__
        if not self.maxApiTries or self.maxApiTries < 1:
            object.__setattr__(self, "maxApiTries", DEFAULT_MAX_API_TRIES)
        if not self.apiTimeoutSecs or self.apiTimeoutSecs < 1:
            object.__setattr__(self, "apiTimeoutSecs", DEFAULT_API_TIMEOUT_SECS)
        if not isinstance(self.output, OutputMode):
            object.__setattr__(self, "output", OutputMode.parse(self.output or OutputMode.WHOLE_RESPONSE.value))
        if not self.apiUrl:
            object.__setattr__(self, "apiUrl", DEFAULT_API_URL)

    def withOutput(self, output: str | None) -> "Profile":
        """Возвращает копию профиля с переопределённым режимом вывода."""
        if not output:
            return self
        return replace(self, output=OutputMode.parse(output))


@dataclass(frozen=True)
class Config:
    profiles: dict[str, Profile] = field(default_factory=dict)
    path: str | None = None

    def resolveProfile(self, name: str) -> Profile:
        """
        Назначение:
            Выбирает профиль по имени.
        Алгоритм:
            - Профиль найден: возвращается он.
            - Не найден профиль "default": конфиг у пользователя не обязателен, возвращается профиль по умолчанию.
            - Не найден любой другой профиль: ProfileNotFoundError.
        """
        if name in self.profiles:
            return self.profiles[name]
        if name == DEFAULT_PROFILE_NAME:
            return Profile()
        raise ProfileNotFoundError(name)


def _lowerKeys(data: dict) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def _parseExpiry(value: Any, path: str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ConfigError(f"Invalid expiryDate in config file {path}: {value}", path=path) from exc
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ConfigError(f"Invalid expiryDate in config file {path}: {value!r}", path=path)


def _parseInt(value: Any, name: str, path: str | None) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Invalid {name} in config file {path}: {value!r}", path=path)
    return value


def _parseAccessKey(data: Any, path: str | None) -> AccessKey | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid accessKey table in config file {path}", path=path)
    raw = _lowerKeys(data)
    keyId = str(raw.get("id") or "")
    secret = str(raw.get("secretaccesskey") or "")
    if not keyId and not secret:
        return None
    return AccessKey(
        id=keyId,
        secretAccessKey=secret,
        email=raw.get("email"),
        expiryDate=_parseExpiry(raw.get("expirydate"), path),
    )


def _parseProfile(data: Any, name: str, path: str | None) -> Profile:
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid profile '{name}' in config file {path}", path=path)
    raw = _lowerKeys(data)
    output = raw.get("output") or OutputMode.WHOLE_RESPONSE.value
    return Profile(
        accessKey=_parseAccessKey(raw.get("accesskey"), path),
        maxApiTries=_parseInt(raw.get("maxapitries"), "maxAPITries", path),
        output=OutputMode.parse(str(output)),
        apiTimeoutSecs=_parseInt(raw.get("apitimeoutsecs"), "apiTimeoutSecs", path),
        apiUrl=str(raw.get("apiurl") or DEFAULT_API_URL),
    )


def parseConfig(text: str, path: str | None = None) -> Config:
    """
    Назначение:
        Разбирает TOML-конфигурацию с таблицей [profiles.<name>].
    Ошибки:
        ConfigError при невалидном TOML или неверных типах полей.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file {path}: {exc}", path=path) from exc

    rawProfiles = _lowerKeys(data).get("profiles") or {}
    if not isinstance(rawProfiles, dict):
        raise ConfigError(f"Invalid profiles table in config file {path}", path=path)

    profiles = {name: _parseProfile(value, name, path) for name, value in rawProfiles.items()}
    return Config(profiles=profiles, path=path)


def loadConfig(config_path: str | None) -> Config:
    """
    Назначение:
        Читает конфиг пользователя.

    Поведение:
        - Файл отсутствует: пустой Config (конфиг не обязателен).
        - Невалидный TOML: ConfigError.
        - Файл не в UTF-8: ConfigError.
    """
    path = Path(config_path) if config_path else defaultConfigPath()
    if not path.exists() or not path.is_file():
        return Config()
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file {path}: not valid UTF-8 ({exc.reason})", path=str(path)) from exc
    return parseConfig(text, path=str(path))
