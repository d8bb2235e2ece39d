from __future__ import annotations

import io
from pathlib import Path

import pytest

from elscli.domain.ports.execution import ApiResponse, RequestSpec
from elscli.errors import NoContentProvidedError
from elscli.infra.http.request_executor import ElsRequestExecutor
from elscli.infra.sources.input_resolver import InputResolver


class DummyClient:
    def __init__(self, status_code: int = 200, body: bytes | None = b"{}") -> None:
        self.status_code = status_code
        self.body = body
        self.last_kwargs: dict | None = None

    def send(self, **kwargs):
        self.last_kwargs = kwargs
        return ApiResponse(status_code=self.status_code, body=self.body)


def make_executor(client: DummyClient, piped: bytes = b"") -> ElsRequestExecutor:
    return ElsRequestExecutor(client, InputResolver(stdin=io.BytesIO(piped)))


def test_put_sends_piped_body():
    client = DummyClient()
    executor = make_executor(client, piped=b'{"name":"ACME"}')

    result = executor.execute(RequestSpec.put("/vendors/V1"))

    assert result.status_code == 200
    assert client.last_kwargs == {
        "method": "PUT",
        "path": "/vendors/V1",
        "content": b'{"name":"ACME"}',
        "params": None,
    }


def test_post_prefers_named_file(tmp_path: Path):
    src = tmp_path / "body.json"
    src.write_bytes(b'{"from":"file"}')
    client = DummyClient()

    make_executor(client, piped=b'{"from":"pipe"}').execute(RequestSpec.post("vendors", str(src)))

    assert client.last_kwargs["content"] == b'{"from":"file"}'
    assert client.last_kwargs["path"] == "/vendors"


@pytest.mark.parametrize("method", ["PUT", "POST"])
def test_body_methods_require_content(method: str):
    client = DummyClient()

    with pytest.raises(NoContentProvidedError):
        make_executor(client).execute(RequestSpec(method, "/vendors/V1"))
    assert client.last_kwargs is None


def test_patch_without_content_is_sent_empty():
    client = DummyClient(status_code=204, body=None)

    result = make_executor(client).execute(RequestSpec.patch("/vendors/V1/paygRuleSets/R1/activate"))

    assert result.status_code == 204
    assert client.last_kwargs["method"] == "PATCH"
    assert client.last_kwargs["content"] is None


def test_patch_with_missing_named_file_fails(tmp_path: Path):
    client = DummyClient()

    with pytest.raises(FileNotFoundError):
        make_executor(client).execute(RequestSpec.patch("/x", str(tmp_path / "absent.json")))


@pytest.mark.parametrize("method", ["GET", "DELETE"])
def test_bodyless_methods_ignore_pipe(method: str):
    client = DummyClient()

    make_executor(client, piped=b'{"ignored":true}').execute(RequestSpec(method, "/vendors/V1"))

    assert client.last_kwargs["content"] is None


def test_error_statuses_are_returned_not_raised():
    client = DummyClient(status_code=500, body=b'{"error":"boom"}')

    result = make_executor(client).execute(RequestSpec.get("/vendors/V1"))

    assert result.status_code == 500
    assert result.body == b'{"error":"boom"}'
