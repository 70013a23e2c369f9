"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import NodeError
from core.domain.models import OutputRecord


def build_records_table(records: Iterable[OutputRecord]) -> Table:
    """Tabla resumen: un registro por fila, con el item de origen."""

    table = Table(title="Anymailfinder results")
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Payload", style="dim", overflow="fold")
    for record in records:
        status = Text("error", style="red") if record.is_error else Text("ok", style="green")
        payload = json.dumps(record.json_, ensure_ascii=False)
        if len(payload) > 160:
            payload = payload[:157] + "..."
        table.add_row(str(record.paired_item), status, payload)
    return table


def print_node_error(console: Console, exc: NodeError) -> None:
    """Panel para un error que abortó la ejecución."""

    body = Text()
    body.append(exc.message + "\n\n")
    body.append(f"Item: {exc.item_index}", style="bold")
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        body.append(f"\nHTTP status: {status_code}", style="dim")
    body.append("\n\nUse --continue-on-fail to keep processing the remaining items.", style="dim")
    console.print(Panel(body, title=Text(type(exc).__name__, style="bold red"), border_style="red"))
