from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок els-cli.
    """

    NO_CONTENT = "NO_CONTENT"
    API_UNREACHABLE = "API_UNREACHABLE"
    UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"
    INVALID_OUTPUT = "INVALID_OUTPUT"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    INVALID_CONFIG = "INVALID_CONFIG"
    NO_ACCESS_KEY = "NO_ACCESS_KEY"
    DECODE_ERROR = "DECODE_ERROR"
    PASSWORD_REQUIRED = "PASSWORD_REQUIRED"
