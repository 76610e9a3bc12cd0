from __future__ import annotations

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from bulk_reconcile.domain.models import AppliedChange, DeployOutcome

_ACTION_STYLES = {"add": "green", "modify": "yellow", "remove": "red"}


def _changed_instance(change: AppliedChange):
    return change.after if change.after is not None else change.before


def outcome_to_dict(outcome: DeployOutcome) -> Dict[str, Any]:
    """
    Summarize an outcome as plain JSON-serializable data.
    """
    applied = []
    for change in outcome.applied_changes:
        instance = _changed_instance(change)
        applied.append(
            {
                "action": change.action,
                "type": instance.type_name if instance else None,
                "name": instance.name if instance else None,
                "identifier": instance.identifier if instance else None,
            }
        )
    return {"applied_changes": applied, "errors": list(outcome.errors)}


def print_outcome(outcome: DeployOutcome, console: Optional[Console] = None) -> None:
    """
    Render a deploy outcome as a rich table of applied changes followed by errors.
    """
    console = console or Console()

    if not outcome.applied_changes and not outcome.errors:
        console.print("[yellow]Nothing to deploy.[/yellow]")
        return

    table = Table(
        title="Deploy Outcome",
        box=box.ROUNDED,
        caption=f"{len(outcome.applied_changes)} applied, {len(outcome.errors)} failed",
    )
    table.add_column("Action", no_wrap=True)
    table.add_column("Type", style="cyan")
    table.add_column("Instance", style="magenta")
    table.add_column("Identifier", style="blue")

    for row in outcome_to_dict(outcome)["applied_changes"]:
        style = _ACTION_STYLES.get(row["action"], "white")
        table.add_row(
            f"[{style}]{row['action']}[/{style}]",
            row["type"] or "",
            row["name"] or "",
            row["identifier"] or "N/A",
        )

    console.print(table)

    for error in outcome.errors:
        console.print(f"[bold red]error[/bold red] {error}", highlight=False)


__all__ = ["outcome_to_dict", "print_outcome"]
