"""Cliente Anymailfinder (httpx).

Implementa `AuthenticatedRequester`:
- Inyecta la API key (vía `build_async_client`).
- Devuelve el JSON parseado tal cual.
- Convierte no-2xx y fallos de red en `ApiRequestError` con el mensaje que
  devuelve la API (`error_explained` / `message` / `error`) si existe.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import ApiRequestError
from core.interfaces.requester import AuthenticatedRequester

logger = logging.getLogger(__name__)

_ERROR_KEYS = ("error_explained", "message", "error")


def _error_message(response: httpx.Response, payload: Any) -> str:
    if isinstance(payload, dict):
        for key in _ERROR_KEYS:
            val = payload.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return f"HTTP {response.status_code}"


def _parse_json(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return None


class AnymailfinderClient(AuthenticatedRequester):
    """Requester asíncrono contra `api.anymailfinder.com`.

    Uso:
        async with AnymailfinderClient(settings) as client:
            await client.request_json("GET", "/v5.0/meta/account.json")
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = build_async_client(self._settings, transport=transport)

    async def __aenter__(self) -> "AnymailfinderClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request_json(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        t0 = time.monotonic()
        try:
            if body is None:
                response = await self._client.request(method, path)
            else:
                response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            raise ApiRequestError(f"Request failed: {exc}") from exc

        duration_ms = int((time.monotonic() - t0) * 1000)
        payload = _parse_json(response)

        if not response.is_success:
            message = _error_message(response, payload)
            logger.info(
                "%s %s failed: %s",
                method,
                path,
                message,
                extra={"status": response.status_code, "duration_ms": duration_ms},
            )
            raise ApiRequestError(message, status_code=response.status_code, payload=payload)

        if payload is None:
            raise ApiRequestError(
                "Response body is not valid JSON",
                status_code=response.status_code,
            )
        logger.debug(
            "%s %s ok",
            method,
            path,
            extra={"status": response.status_code, "duration_ms": duration_ms},
        )
        return payload
