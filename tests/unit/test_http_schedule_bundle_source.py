from __future__ import annotations

import asyncio

import httpx
import pytest

from src.adapters.http.http_schedule_bundle_source import HttpScheduleBundleSource
from src.adapters.settings import DEFAULT_SCHEDULE_URL


def test_url_defaults_to_env_then_builtin(monkeypatch) -> None:
    monkeypatch.delenv("GTFS_SCHEDULE_URL", raising=False)
    assert HttpScheduleBundleSource().url == DEFAULT_SCHEDULE_URL

    monkeypatch.setenv("GTFS_SCHEDULE_URL", "https://example.test/gtfs.zip")
    assert HttpScheduleBundleSource().url == "https://example.test/gtfs.zip"


def test_fetch_bundle_sends_default_headers_and_returns_bytes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"PK\x03\x04zip")

    source = HttpScheduleBundleSource(
        url="https://example.test/gtfs.zip",
        headers={"X-Trace": "1"},
        transport=httpx.MockTransport(handler),
    )

    payload = asyncio.run(source.fetch_bundle())

    assert payload == b"PK\x03\x04zip"
    (request,) = seen
    assert request.headers["Cache-Control"] == "no-cache"
    assert request.headers["Content-Type"] == "application/octet-stream"
    assert request.headers["X-Trace"] == "1"


def test_fetch_bundle_raises_on_http_error() -> None:
    source = HttpScheduleBundleSource(
        url="https://example.test/gtfs.zip",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(source.fetch_bundle())
