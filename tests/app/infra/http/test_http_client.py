"""Testes do HttpClient base com httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from app.infra.http import HttpClient, HttpClientConfig, HttpError


def _client(handler, **config) -> HttpClient:
    return HttpClient(
        HttpClientConfig(backoff_base_seconds=0, backoff_max_seconds=0, **config),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_post_returns_response_and_merges_headers() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler, default_headers={"X-App": "crm"})
    response = await client.post("https://api.test/send", json={"a": 1}, headers={"X-Req": "1"})

    assert response.json() == {"ok": True}
    assert seen["x-app"] == "crm"
    assert seen["x-req"] == "1"


@pytest.mark.asyncio
async def test_client_error_is_returned_to_caller() -> None:
    client = _client(lambda request: httpx.Response(400, json={"error": "bad"}))

    response = await client.get("https://api.test/item")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_server_error_raises_retryable_without_retry_by_default() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(HttpError) as exc_info:
        await _client(handler).post("https://api.test/send", json={})

    assert exc_info.value.status_code == 503
    assert exc_info.value.is_retryable is True
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_rate_limit_is_retried_when_enabled() -> None:
    responses = iter([httpx.Response(429), httpx.Response(200, json={"ok": True})])

    client = _client(lambda request: next(responses), max_retries=1)
    response = await client.post("https://api.test/send", json={})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_timeout_becomes_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timeout", request=request)

    with pytest.raises(HttpError, match="http_timeout"):
        await _client(handler).get("https://api.test/slow")


@pytest.mark.asyncio
async def test_connection_error_becomes_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(HttpError, match="http_connection_error"):
        await _client(handler).get("https://api.test/down")
