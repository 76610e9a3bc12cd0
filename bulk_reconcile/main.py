from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError

from bulk_reconcile.config import get_settings
from bulk_reconcile.engine import deploy_instances_group
from bulk_reconcile.infrastructure.memory_store import InMemoryRemoteStore
from bulk_reconcile.infrastructure.remote_store import RetryingRemoteStore
from bulk_reconcile.payload import DeployPayload
from bulk_reconcile.reporter import outcome_to_dict, print_outcome
from bulk_reconcile.utils.logging import configure_logging

app = typer.Typer(help="bulk-reconcile CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} log_level={settings.log_level} | "
        f"max_query_length={settings.max_query_length} "
        f"max_query_clauses={settings.max_query_clauses} | "
        f"query_retry_attempts={settings.query_retry_attempts}"
    )


@app.command()
def deploy(
    payload: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON payload with record_type, data_management, remote_records and changes.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON."),
) -> None:
    """
    Dry-run a change group against an in-memory store seeded from the payload.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    try:
        request = DeployPayload.model_validate_json(payload.read_text(encoding="utf-8"))
    except ValidationError as exc:
        typer.echo(f"Invalid payload: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    store = InMemoryRemoteStore(
        {request.record_type.name: request.remote_records},
        id_column=request.record_type.id_field,
    )
    client = RetryingRemoteStore(
        store,
        attempts=settings.query_retry_attempts,
        max_wait=settings.query_retry_max_wait,
    )
    outcome = asyncio.run(
        deploy_instances_group(request.build_changes(), client, request.data_management, settings)
    )

    if as_json:
        typer.echo(json.dumps(outcome_to_dict(outcome), indent=2))
    else:
        print_outcome(outcome)

    if outcome.errors:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
