def maskSecret(value: str | None) -> str | None:
    """
    Назначение:
        Маскирует секреты для безопасного вывода в stdout/logs.

    Входные данные:
        value: str | None
            Исходное значение (secretAccessKey, пароль).

    Выходные данные:
        str | None
            Если value задано, возвращает '***', иначе None.
    """
    if value is None:
        return None
    return "***"


def truncateText(value: str | None, limit: int = 200) -> str | None:
    """
    Назначение:
        Ограничивает длину текста, чтобы тела ответов не раздували лог.
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    head = limit - len(suffix)
    return value[:head] + suffix


def bodySnippet(body: bytes | None, limit: int = 200) -> str | None:
    """Короткий фрагмент тела ответа для отладочного лога."""
    if not body:
        return None
    return truncateText(body.decode("utf-8", errors="replace"), limit)
