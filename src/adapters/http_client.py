"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza base URL, timeouts, headers JSON y la inyección de credencial.
- Facilita testeo: se puede pasar un `transport` (p.ej. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_auth_headers(settings: AppSettings) -> dict[str, str]:
    """Header `Authorization` a partir de la API key configurada.

    Por defecto se envía la key tal cual (`Authorization: <key>`), que es la
    forma que documenta Anymailfinder. Con `auth_scheme="Bearer"` (env
    `ANYMAILFINDER_AUTH_SCHEME`) pasa a `Authorization: Bearer <key>`.

    Sin API key no se añade nada: la API responderá 401 y el error llegará
    como `ApiRequestError` al item.
    """

    if not settings.api_key:
        return {}
    value = settings.api_key
    if settings.auth_scheme:
        value = f"{settings.auth_scheme} {value}"
    return {"Authorization": value}


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults para una API JSON.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las llamadas se comporten igual.
    - Facilita testeo y futuras políticas (proxies).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    headers.update(build_auth_headers(settings))
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
