from __future__ import annotations

import json

import httpx
import pytest

from adapters.anymailfinder_client import AnymailfinderClient
from adapters.http_client import build_auth_headers
from core.config import AppSettings
from core.domain.errors import ApiRequestError
from core.services.dispatcher import execute


def _recording_transport(seen: list[httpx.Request], status: int = 200, payload=None):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json={"ok": True} if payload is None else payload)

    return httpx.MockTransport(handler)


def test_auth_header_raw_key_and_scheme():
    assert build_auth_headers(AppSettings(api_key=None)) == {}
    assert build_auth_headers(AppSettings(api_key="k-123")) == {"Authorization": "k-123"}
    assert build_auth_headers(AppSettings(api_key="k-123", auth_scheme="Bearer")) == {
        "Authorization": "Bearer k-123"
    }


@pytest.mark.asyncio
async def test_get_account_info_without_body():
    seen: list[httpx.Request] = []
    payload = {"credits_left": 10}
    settings = AppSettings(api_key="secret")

    async with AnymailfinderClient(settings, transport=_recording_transport(seen, payload=payload)) as client:
        result = await client.request_json("GET", "/v5.0/meta/account.json")

    assert result == payload
    request = seen[0]
    assert request.method == "GET"
    assert str(request.url) == "https://api.anymailfinder.com/v5.0/meta/account.json"
    assert request.content == b""
    assert request.headers["Authorization"] == "secret"
    assert request.headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_linkedin_lookup_end_to_end():
    seen: list[httpx.Request] = []
    settings = AppSettings(api_key="secret")

    async with AnymailfinderClient(settings, transport=_recording_transport(seen)) as client:
        records = await execute(
            [{"resource": "linkedinEmail", "operation": "findEmail", "linkedinUrl": "https://linkedin.com/in/x"}],
            client,
        )

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.anymailfinder.com/v5.1/find-email/linkedin-url"
    assert json.loads(request.content) == {"linkedin_url": "https://linkedin.com/in/x"}
    assert records[0].json_ == {"ok": True}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"error": "unauthorized", "error_explained": "Invalid API key."}, "Invalid API key."),
        ({"message": "Not enough credits"}, "Not enough credits"),
        ({"error": "bad_request"}, "bad_request"),
        ({}, "HTTP 402"),
    ],
)
async def test_non_2xx_raises_with_upstream_message(payload, expected):
    seen: list[httpx.Request] = []
    transport = _recording_transport(seen, status=402, payload=payload)

    async with AnymailfinderClient(AppSettings(api_key="k"), transport=transport) as client:
        with pytest.raises(ApiRequestError) as exc_info:
            await client.request_json("POST", "/v5.1/verify-email", {"email": "a@b.c"})

    assert exc_info.value.message == expected
    assert exc_info.value.status_code == 402


@pytest.mark.asyncio
async def test_network_failure_becomes_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with AnymailfinderClient(AppSettings(), transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiRequestError) as exc_info:
            await client.request_json("GET", "/v5.0/meta/account.json")

    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.message


@pytest.mark.asyncio
async def test_invalid_json_body_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    async with AnymailfinderClient(AppSettings(), transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiRequestError):
            await client.request_json("GET", "/v5.0/meta/account.json")


@pytest.mark.asyncio
async def test_custom_base_url():
    seen: list[httpx.Request] = []
    settings = AppSettings(base_url="https://sandbox.example.test")

    async with AnymailfinderClient(settings, transport=_recording_transport(seen)) as client:
        await client.request_json("POST", "/v5.1/verify-email", {"email": "a@b.c"})

    assert str(seen[0].url) == "https://sandbox.example.test/v5.1/verify-email"
    assert "Authorization" not in seen[0].headers
