from __future__ import annotations

import io
from pathlib import Path

import pytest

from elscli.errors import NoContentProvidedError
from elscli.infra.sources.input_resolver import InputResolver


class TtyStream(io.BytesIO):
    def isatty(self) -> bool:
        return True


def test_resolve_reads_named_file(tmp_path: Path):
    src = tmp_path / "vendor.json"
    src.write_bytes(b'{"name": "ACME"}')

    data = InputResolver(stdin=io.BytesIO(b"ignored")).resolve(str(src))

    assert data == b'{"name": "ACME"}'


def test_resolve_missing_file_raises_os_error(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        InputResolver(stdin=io.BytesIO(b"")).resolve(str(tmp_path / "absent.json"))


def test_resolve_reads_piped_bytes():
    data = InputResolver(stdin=io.BytesIO(b'{"a":1}')).resolve(None)
    assert data == b'{"a":1}'


def test_resolve_reads_text_stream_buffer():
    stream = io.TextIOWrapper(io.BytesIO('{"name":"Zoë"}'.encode("utf-8")), encoding="utf-8")
    data = InputResolver(stdin=stream).resolve(None)
    assert data == '{"name":"Zoë"}'.encode("utf-8")


def test_resolve_empty_pipe_is_no_content():
    with pytest.raises(NoContentProvidedError):
        InputResolver(stdin=io.BytesIO(b"")).resolve(None)


def test_resolve_terminal_is_no_content():
    with pytest.raises(NoContentProvidedError):
        InputResolver(stdin=TtyStream(b"typed")).resolve(None)
