"""Errores del dominio.

Por qué una jerarquía propia:
- El dispatcher necesita distinguir errores por item (que en modo tolerante se
  convierten en registros `{error: ...}`) del resto de fallos del proceso.
- Los adaptadores HTTP lanzan `ApiRequestError` sin conocer índices de item;
  el dispatcher lo envuelve en `NodeRequestError` con el índice.
"""

from __future__ import annotations

from typing import Any


class ApiRequestError(Exception):
    """Fallo de una llamada a la API (no-2xx, red, credenciales)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NodeError(Exception):
    """Error asociado a un item concreto de la ejecución."""

    def __init__(self, message: str, *, item_index: int) -> None:
        super().__init__(message)
        self.message = message
        self.item_index = item_index

    def __str__(self) -> str:
        return f"{self.message} [item {self.item_index}]"


class NodeValidationError(NodeError):
    """Parámetros insuficientes o inválidos; no se hizo ninguna llamada."""


class NodeRequestError(NodeError):
    """La llamada a la API falló para este item."""

    def __init__(
        self,
        message: str,
        *,
        item_index: int,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, item_index=item_index)
        self.status_code = status_code

    @classmethod
    def from_api_error(cls, exc: ApiRequestError, *, item_index: int) -> "NodeRequestError":
        return cls(exc.message, item_index=item_index, status_code=exc.status_code)


class NodeInternalError(NodeError):
    """Combinación (resource, operation) sin ruta en la tabla de despacho."""
