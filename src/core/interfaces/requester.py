"""Contrato de la capacidad "petición JSON autenticada".

Por qué Protocol:
- El dispatcher solo necesita "método + path + body → JSON"; transporte y
  credenciales son responsabilidad del host/adaptador.
- Permite sustituir el cliente httpx por un fake en tests sin herencia.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AuthenticatedRequester(Protocol):
    """Contrato mínimo para hablar con la API.

    Reglas de diseño:
    - `request_json` es asíncrono porque hace I/O (HTTP).
    - Inyecta la credencial almacenada en cada petición.
    - Devuelve el JSON parseado o lanza `ApiRequestError` ante no-2xx o fallo
      de red.
    """

    async def request_json(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        ...
