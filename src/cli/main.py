"""CLI host for the Anymailfinder node.

Every action command builds the node-level parameters from its options and
runs them through the dispatcher; `run` does the same for a file of items.
Results go to stdout as JSON (records keep `pairedItem`), to a file with
`--output`, or to a Rich table with `--table`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional, Sequence

import typer
from rich.console import Console

from adapters.anymailfinder_client import AnymailfinderClient
from adapters.json_exporter import dump_records, export_records_json, load_items
from cli import doctor
from cli.ui_components import build_records_table, print_node_error
from core.config import AppSettings
from core.domain.errors import NodeError
from core.domain.models import NodeItem, OutputRecord, Resource
from core.logging_setup import init_logging
from core.services.dispatcher import execute

app = typer.Typer(
    no_args_is_help=True,
    help="Find and verify email addresses using the Anymailfinder API.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

ContinueOnFail = typer.Option(
    None,
    "--continue-on-fail/--fail-fast",
    help="Emit {error} records for failing items instead of aborting.",
)
OutputPath = typer.Option(None, "--output", "-o", help="Write the JSON records to this file.")
AsTable = typer.Option(False, "--table", help="Print a Rich table instead of JSON.")


async def _execute(
    settings: AppSettings,
    items: Sequence[NodeItem],
    base_parameters: dict[str, Any],
    *,
    continue_on_fail: bool,
    max_concurrency: int,
) -> list[OutputRecord]:
    async with AnymailfinderClient(settings) as client:
        return await execute(
            items,
            client,
            base_parameters=base_parameters,
            continue_on_fail=continue_on_fail,
            max_concurrency=max_concurrency,
        )


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v not in (None, "")}


def _run_node(
    base_parameters: dict[str, Any],
    *,
    items: Sequence[NodeItem] | None = None,
    continue_on_fail: bool | None = None,
    concurrency: int | None = None,
    output: Path | None = None,
    table: bool = False,
) -> None:
    settings = AppSettings()
    init_logging(settings=settings)

    try:
        records = asyncio.run(
            _execute(
                settings,
                items if items is not None else [NodeItem()],
                base_parameters,
                continue_on_fail=settings.continue_on_fail if continue_on_fail is None else continue_on_fail,
                max_concurrency=concurrency or settings.max_concurrency,
            )
        )
    except NodeError as exc:
        print_node_error(_err_console, exc)
        raise typer.Exit(code=1) from exc

    if output is not None:
        path = export_records_json(records=records, output_path=output)
        _err_console.print(f"[green]Saved {len(records)} record(s) to:[/green] {path}")
    elif table:
        _console.print(build_records_table(records))
    else:
        typer.echo(dump_records(records), nl=False)


@app.command()
def person(
    full_name: str = typer.Option("", "--full-name", help="Full name, e.g. 'John Doe'."),
    domain: str = typer.Option("", "--domain", help="Company domain, e.g. example.com."),
    company_name: str = typer.Option("", "--company-name", help="Company name, e.g. 'Apple Inc'."),
    first_name: str = typer.Option("", "--first-name", help="Alternative to --full-name."),
    last_name: str = typer.Option("", "--last-name", help="Alternative to --full-name."),
    position: str = typer.Option("", "--position", help="Job title or position."),
    department: str = typer.Option("", "--department", help="Department the person works in."),
    continue_on_fail: Optional[bool] = ContinueOnFail,
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Find a person's email by name and company."""

    _run_node(
        {
            "resource": Resource.PERSON_EMAIL.value,
            "fullName": full_name,
            "domain": domain,
            "companyName": company_name,
            "additionalFields": _compact(
                {
                    "firstName": first_name,
                    "lastName": last_name,
                    "position": position,
                    "department": department,
                }
            ),
        },
        continue_on_fail=continue_on_fail,
        output=output,
        table=table,
    )


@app.command()
def company(
    domain: str = typer.Option("", "--domain", help="Company domain."),
    company_name: str = typer.Option("", "--company-name", help="Company name."),
    department: str = typer.Option("", "--department", help="Filter by department."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Max number of results (default 50)."),
    continue_on_fail: Optional[bool] = ContinueOnFail,
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Find all emails at a company."""

    _run_node(
        {
            "resource": Resource.COMPANY_EMAILS.value,
            "domain": domain,
            "companyName": company_name,
            "additionalFields": _compact({"department": department, "limit": limit}),
        },
        continue_on_fail=continue_on_fail,
        output=output,
        table=table,
    )


@app.command(name="decision-maker")
def decision_maker(
    domain: str = typer.Option("", "--domain", help="Company domain."),
    company_name: str = typer.Option("", "--company-name", help="Company name."),
    department: str = typer.Option("", "--department", help="Filter by department."),
    continue_on_fail: Optional[bool] = ContinueOnFail,
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Find a decision maker's email."""

    _run_node(
        {
            "resource": Resource.DECISION_MAKER.value,
            "domain": domain,
            "companyName": company_name,
            "additionalFields": _compact({"department": department}),
        },
        continue_on_fail=continue_on_fail,
        output=output,
        table=table,
    )


@app.command()
def linkedin(
    linkedin_url: str = typer.Argument(..., help="LinkedIn profile URL."),
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Find an email by LinkedIn profile URL."""

    _run_node(
        {"resource": Resource.LINKEDIN_EMAIL.value, "linkedinUrl": linkedin_url},
        output=output,
        table=table,
    )


@app.command()
def verify(
    email: str = typer.Argument(..., help="Email address to verify."),
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Verify if an email address is valid."""

    _run_node(
        {"resource": Resource.EMAIL_VERIFICATION.value, "email": email},
        output=output,
        table=table,
    )


@app.command()
def account(
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Get account details and remaining credits."""

    _run_node({"resource": Resource.ACCOUNT_INFO.value}, output=output, table=table)


@app.command(name="run")
def run_items(
    items_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON array, {\"items\": [...]} or JSON Lines file of items.",
    ),
    resource: Optional[Resource] = typer.Option(
        None,
        "--resource",
        "-r",
        case_sensitive=False,
        help="Resource for items that do not set one.",
    ),
    continue_on_fail: Optional[bool] = ContinueOnFail,
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        min=1,
        max=50,
        help="Items in flight at once (default: settings, 1 = sequential).",
    ),
    output: Optional[Path] = OutputPath,
    table: bool = AsTable,
) -> None:
    """Run a batch of items; item keys (resource, domain, ...) act as parameters."""

    try:
        items = load_items(items_file)
    except (ValueError, KeyError) as exc:
        raise typer.BadParameter(f"Could not read items: {exc}", param_hint="ITEMS_FILE") from exc

    base: dict[str, Any] = {}
    if resource is not None:
        base["resource"] = resource.value

    _run_node(
        base,
        items=items,
        continue_on_fail=continue_on_fail,
        concurrency=concurrency,
        output=output,
        table=table,
    )


def run() -> None:
    app()
