from __future__ import annotations

import json
from typing import IO

from elscli.config import OutputMode
from elscli.domain.ports.execution import ApiResponse
from elscli.errors import ResponseDecodeError

NO_CONTENT_STATUS = 204
INDENT = "\t"


def _rejectConstant(name: str) -> None:
    raise ValueError(f"invalid JSON literal {name}")


def _reindent(text: str) -> str:
    """Переставляет отступы между токенами уже проверенного JSON, не трогая сами токены."""
    out: list[str] = []
    depth = 0
    inString = False
    escaped = False
    pendingOpen = False

    def newline() -> None:
        out.append("\n" + INDENT * depth)

    for ch in text:
        if inString:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                inString = False
            continue
        if ch in " \t\r\n":
            continue
        if pendingOpen and ch not in "]}":
            pendingOpen = False
            depth += 1
            newline()
        if ch == '"':
            inString = True
            out.append(ch)
        elif ch in "{[":
            out.append(ch)
            pendingOpen = True
        elif ch in "]}":
            if pendingOpen:
                # пустой объект/массив остаётся в одну строку
                pendingOpen = False
            else:
                depth -= 1
                newline()
            out.append(ch)
        elif ch == ",":
            out.append(ch)
            newline()
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)
    return "".join(out)


def prettyJson(body: bytes) -> str:
    """
    Назначение:
        Переформатирует JSON с отступом табуляцией.
        Ключи, строки и числа выводятся в том виде, в каком пришли (1.50 остаётся 1.50).
    Ошибки:
        ResponseDecodeError, если тело не UTF-8 JSON (включая NaN/Infinity).
    """
    try:
        text = body.decode("utf-8")
        json.loads(text, parse_constant=_rejectConstant)
    except (UnicodeDecodeError, ValueError) as exc:
        raise ResponseDecodeError(str(exc)) from exc
    return _reindent(text)


def formatResponse(response: ApiResponse, outputMode: OutputMode, stream: IO[str]) -> None:
    """
    Назначение:
        Печатает выбранные режимом части ответа: строку статуса и/или тело.

    Поведение:
        - Тело читается, только если режим не statusCodeOnly, тело непустое и статус не 204.
        - Статус печатается, если режим не bodyOnly.
        - Ошибка разбора тела выбрасывается до какой-либо записи в stream.
    """
    captureBody = (
        outputMode != OutputMode.STATUS_CODE_ONLY
        and bool(response.body)
        and response.status_code != NO_CONTENT_STATUS
    )

    pretty = ""
    if captureBody:
        pretty = prettyJson(response.body or b"")

    if outputMode != OutputMode.BODY_ONLY:
        stream.write(f"{response.status_code}\n")

    if outputMode != OutputMode.STATUS_CODE_ONLY and pretty:
        stream.write(pretty + "\n")
