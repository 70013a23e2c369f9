"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.anymailfinder_client import AnymailfinderClient
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import ApiRequestError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_account(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with AnymailfinderClient(settings) as client:
            payload = await client.request_json("GET", "/v5.0/meta/account.json")
    except ApiRequestError as exc:
        return False, exc.message
    credits = payload.get("credits_left") if isinstance(payload, dict) else None
    return True, f"credits_left={credits}" if credits is not None else "OK"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Anymailfinder Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.api_key:
        table.add_row("API key", "OK", "Configured")
    else:
        table.add_row("API key", "MISSING", "Run `anymailfinder doctor setup` or set ANYMAILFINDER_API_KEY")
    table.add_row("Base URL", "OK", settings.base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("User config", "OK" if get_user_env_file().exists() else "ABSENT", str(get_user_env_file()))

    # Connectivity + credentials (one GET, no credits spent)
    if settings.api_key:
        ok, detail = asyncio.run(_check_account(settings))
        table.add_row("Account endpoint", "OK" if ok else "FAIL", detail)
    else:
        table.add_row("Account endpoint", "SKIPPED", "No API key")

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores the API key in the user config .env)."""

    api_key = typer.prompt("Anymailfinder API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("API key is required")

    scheme = typer.prompt(
        "Authorization scheme (empty for raw key)",
        default="",
        show_default=False,
    ).strip()

    env_path = write_user_env_vars(
        {
            "ANYMAILFINDER_API_KEY": api_key,
            "ANYMAILFINDER_AUTH_SCHEME": scheme or None,
        }
    )

    _console.print(f"[green]Saved API config to:[/green] {env_path}")
