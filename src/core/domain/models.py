"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta de los parámetros del nodo (enums, `limit >= 1`)
  sin acoplar el Core a librerías de I/O.
- Los parámetros llegan con nombres camelCase (como en la UI del nodo); los
  alias permiten trabajar en snake_case dentro de Python.

Nota:
- Estos modelos describen *qué* se pide a la API, no *cómo* se envía.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

DEFAULT_LIMIT = 50


class Resource(str, Enum):
    """Categorías de capacidades de la API."""

    PERSON_EMAIL = "personEmail"
    COMPANY_EMAILS = "companyEmails"
    DECISION_MAKER = "decisionMaker"
    LINKEDIN_EMAIL = "linkedinEmail"
    EMAIL_VERIFICATION = "emailVerification"
    ACCOUNT_INFO = "accountInfo"


class Operation(str, Enum):
    FIND_EMAIL = "findEmail"
    FIND_EMAILS = "findEmails"
    VERIFY_EMAIL = "verifyEmail"
    GET_INFO = "getInfo"


# Cada recurso expone hoy una única operación; es la que se usa si el item no
# indica ninguna.
DEFAULT_OPERATIONS: dict[Resource, Operation] = {
    Resource.PERSON_EMAIL: Operation.FIND_EMAIL,
    Resource.COMPANY_EMAILS: Operation.FIND_EMAILS,
    Resource.DECISION_MAKER: Operation.FIND_EMAIL,
    Resource.LINKEDIN_EMAIL: Operation.FIND_EMAIL,
    Resource.EMAIL_VERIFICATION: Operation.VERIFY_EMAIL,
    Resource.ACCOUNT_INFO: Operation.GET_INFO,
}


class AdditionalFields(BaseModel):
    """Colección de campos opcionales ("Additional Fields" en la UI)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    first_name: str = Field(
        default="",
        alias="firstName",
        description="Nombre de pila (alternativa a fullName).",
    )
    last_name: str = Field(
        default="",
        alias="lastName",
        description="Apellido (alternativa a fullName).",
    )
    position: str = Field(
        default="",
        alias="position",
        description="Cargo o puesto de la persona.",
    )
    department: str = Field(
        default="",
        alias="department",
        description="Departamento (filtro o dato de la persona).",
    )
    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        alias="limit",
        description="Máximo de resultados (solo companyEmails).",
    )

    @field_validator("first_name", "last_name", "position", "department", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("limit", mode="before")
    @classmethod
    def null_as_default_limit(cls, value: Any) -> Any:
        return DEFAULT_LIMIT if value is None else value


class NodeParameters(BaseModel):
    """Parámetros resueltos para un item.

    Por qué un único modelo para todos los recursos:
    - La UI del nodo comparte campos (domain/companyName) entre recursos; qué
      campos se usan lo decide el constructor de body de cada ruta.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    resource: Resource = Field(
        default=Resource.PERSON_EMAIL,
        description="Recurso seleccionado.",
    )
    operation: Operation | None = Field(
        default=None,
        description="Operación; si falta se usa la del recurso.",
    )
    full_name: str = Field(default="", alias="fullName")
    domain: str = Field(default="", alias="domain")
    company_name: str = Field(default="", alias="companyName")
    linkedin_url: str = Field(default="", alias="linkedinUrl")
    email: str = Field(default="", alias="email")
    additional_fields: AdditionalFields = Field(
        default_factory=AdditionalFields,
        alias="additionalFields",
    )

    # Los items que vienen de otros nodos suelen traer `null`; cuenta como vacío.
    @field_validator("full_name", "domain", "company_name", "linkedin_url", "email", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("additional_fields", mode="before")
    @classmethod
    def null_as_no_fields(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def effective_operation(self) -> Operation:
        return self.operation or DEFAULT_OPERATIONS[self.resource]


class ApiRequest(BaseModel):
    """Descriptor de una llamada HTTP (método + path + body JSON)."""

    method: str = Field(..., min_length=3, max_length=7)
    path: str = Field(..., min_length=1)
    body: dict[str, Any] | None = Field(
        default=None,
        description="Body JSON; `None` para peticiones sin cuerpo (GET).",
    )


class NodeItem(BaseModel):
    """Un item de entrada del pipeline de ejecución."""

    json_: dict[str, Any] = Field(default_factory=dict, alias="json")

    model_config = ConfigDict(populate_by_name=True)


class OutputRecord(BaseModel):
    """Registro de salida.

    `json` es el payload crudo de la API (sin transformar) o `{"error": msg}`
    en modo tolerante. `paired_item` apunta al índice del item de entrada.
    """

    model_config = ConfigDict(populate_by_name=True)

    json_: Any = Field(default=None, alias="json")
    paired_item: int = Field(..., ge=0, alias="pairedItem")

    @property
    def is_error(self) -> bool:
        return isinstance(self.json_, dict) and set(self.json_) == {"error"}
