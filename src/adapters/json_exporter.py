"""Lectura de items y exportación JSON de resultados.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines (jq, n8n, scripts).
- Los registros de salida conservan `pairedItem` para correlacionar con la
  entrada.

Formatos de entrada aceptados:
- Array JSON de objetos: `[{"domain": "..."}, ...]`
- Objeto con clave `items`: `{"items": [...]}`
- JSON Lines: un objeto por línea.
Cada objeto puede venir envuelto como `{"json": {...}}` (forma de item n8n).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.domain.models import NodeItem, OutputRecord


def _as_item(raw: Any, position: int) -> NodeItem:
    if not isinstance(raw, dict):
        raise ValueError(f"Item {position} is not a JSON object")
    if set(raw) == {"json"} and isinstance(raw["json"], dict):
        return NodeItem(json=raw["json"])
    return NodeItem(json=raw)


def parse_items(text: str) -> list[NodeItem]:
    """Parsea items desde texto JSON o JSON Lines."""

    stripped = text.strip()
    if not stripped:
        return []

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        data = [json.loads(line) for line in stripped.splitlines() if line.strip()]

    if isinstance(data, dict):
        data = data["items"] if isinstance(data.get("items"), list) else [data]
    if not isinstance(data, list):
        raise ValueError("Items must be a JSON array, object or JSON Lines")
    return [_as_item(raw, i) for i, raw in enumerate(data)]


def load_items(path: Path) -> list[NodeItem]:
    return parse_items(path.read_text(encoding="utf-8"))


def records_to_payload(records: Iterable[OutputRecord]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json", by_alias=True) for record in records]


def dump_records(records: Iterable[OutputRecord]) -> str:
    return json.dumps(records_to_payload(records), ensure_ascii=False, indent=2) + "\n"


def export_records_json(*, records: Iterable[OutputRecord], output_path: Path) -> Path:
    """Exporta registros a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_records(records), encoding="utf-8")
    return output_path
