"""Tests for mcpgen.runtime.helpers.dispatch.

Requests go through an ``httpx.MockTransport`` so no network is touched.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from mcpgen.runtime.helpers import dispatch


@pytest.fixture(autouse=True)
def _no_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("API_BASE_URL", raising=False)


class _Recorder:
    """Handler that records every request and answers with a fixed response."""

    def __init__(self, status: int = 200, text: str = '{"ok":true}') -> None:
        self.status = status
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, text=self.text)


def _call(
    handler: Callable[[httpx.Request], httpx.Response],
    method: str,
    path: str,
    params: dict[str, Any],
    header_params: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    async def run() -> dict[str, Any]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await dispatch(method, path, params, header_params, client=client)

    return asyncio.run(run())


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestResults:
    def test_success_returns_body_text(self) -> None:
        result = _call(_Recorder(text="hello"), "get", "/ping", {})
        assert result == {"content": [{"type": "text", "text": "hello"}]}

    def test_non_success_status_is_error_result(self) -> None:
        result = _call(_Recorder(status=404), "get", "/pets/{id}", {"id": "1"})
        assert result == {
            "content": [{"type": "text", "text": "Error: HTTP 404: Not Found"}],
            "isError": True,
        }

    def test_server_error(self) -> None:
        result = _call(_Recorder(status=503), "post", "/jobs", {})
        assert result["isError"] is True
        assert result["content"][0]["text"] == "Error: HTTP 503: Service Unavailable"

    def test_transport_failure_is_error_result(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = _call(refuse, "get", "/ping", {})
        assert result == {
            "content": [{"type": "text", "text": "Error: connection refused"}],
            "isError": True,
        }

    def test_redirect_status_is_not_success(self) -> None:
        result = _call(_Recorder(status=302), "get", "/old", {})
        assert result["isError"] is True

    def test_unencodable_header_value_is_error_result(self) -> None:
        recorder = _Recorder()
        result = _call(recorder, "get", "/search", {"keyword": "café"})
        assert result["isError"] is True
        assert result["content"][0]["text"].startswith("Error: UnicodeEncodeError")
        assert recorder.requests == []

    def test_builder_failure_is_error_result(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(path_pattern: str, params: dict[str, Any]) -> str:
            raise ValueError("bad path")

        monkeypatch.setattr("mcpgen.runtime.helpers.build_url", broken)
        result = _call(_Recorder(), "get", "/ping", {})
        assert result == {
            "content": [{"type": "text", "text": "Error: ValueError: bad path"}],
            "isError": True,
        }


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequestShape:
    def test_get_never_sends_body(self) -> None:
        recorder = _Recorder()
        _call(recorder, "GET", "/pets", {"body": {"ignored": True}})
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.content == b""
        assert str(request.url) == "https://api.example.com/pets"

    def test_post_sends_json_body(self) -> None:
        recorder = _Recorder(status=201)
        _call(recorder, "post", "/pets", {"body": {"name": "rex"}})
        request = recorder.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"name": "rex"}
        assert request.headers["content-type"] == "application/json"

    def test_path_and_query(self) -> None:
        recorder = _Recorder()
        _call(recorder, "delete", "/pets/{petId}", {"petId": "a/b", "force": True})
        assert str(recorder.requests[0].url) == "https://api.example.com/pets/a%2Fb?force=true"

    def test_base_url_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_BASE_URL", "http://localhost:9000/api/")
        recorder = _Recorder()
        _call(recorder, "get", "/ping", {})
        assert str(recorder.requests[0].url) == "http://localhost:9000/api/ping"

    def test_declared_headers_stay_out_of_query(self) -> None:
        recorder = _Recorder()
        _call(
            recorder,
            "get",
            "/pets",
            {"xRequestID": "abc", "limit": 5},
            {"xRequestID": "X-Request-ID"},
        )
        request = recorder.requests[0]
        assert str(request.url) == "https://api.example.com/pets?limit=5"
        assert request.headers["X-Request-ID"] == "abc"

    def test_heuristic_headers_also_appear_in_query(self) -> None:
        recorder = _Recorder()
        _call(recorder, "get", "/pets", {"apiKey": "k"})
        request = recorder.requests[0]
        assert request.headers["apiKey"] == "k"
        assert request.url.params["apiKey"] == "k"


class TestClientLifecycle:
    def test_temporary_client_is_closed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        created: list[httpx.AsyncClient] = []
        real_client = httpx.AsyncClient

        def factory(**kwargs: Any) -> httpx.AsyncClient:
            client = real_client(transport=httpx.MockTransport(_Recorder()), **kwargs)
            created.append(client)
            return client

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        result = asyncio.run(dispatch("get", "/ping", {}))

        assert "isError" not in result
        assert len(created) == 1
        assert created[0].is_closed

    def test_temporary_client_is_closed_on_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        created: list[httpx.AsyncClient] = []
        real_client = httpx.AsyncClient

        def factory(**kwargs: Any) -> httpx.AsyncClient:
            client = real_client(transport=httpx.MockTransport(_Recorder()), **kwargs)
            created.append(client)
            return client

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        result = asyncio.run(dispatch("get", "/search", {"apiKey": "ключ"}))

        assert result["isError"] is True
        assert created[0].is_closed
