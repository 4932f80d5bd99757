"""Care template commands."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from hb_cli.commands.common import fail, get_state, print_json_payload
from hb_cli.core.config import resolve_template_store
from hb_cli.core.models import CareTemplate
from hb_cli.core.state import CLIState
from hb_cli.core.templates import TemplateError, TemplateStore

app = typer.Typer(help="Manage care templates")


def _store(state: CLIState) -> TemplateStore:
    return TemplateStore(resolve_template_store(state.config))


def _show(state: CLIState, templates: List[CareTemplate], action: Optional[str] = None) -> None:
    if state.json_output:
        payload = [template.to_dict() for template in templates]
        if action:
            print_json_payload(state, {"status": action, "template": payload[0]})
        else:
            print_json_payload(state, {"templates": payload})
        return

    if state.plain_output:
        for template in templates:
            typer.echo(
                "\t".join(
                    [
                        template.id,
                        template.name,
                        template.category,
                        template.frequency,
                        "active" if template.active else "inactive",
                    ]
                )
            )
        return

    if action:
        template = templates[0]
        state.console.print(f"Template {action}: {template.name} ({template.id})")
        return

    table = Table(title=f"Care Templates ({len(templates)})")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Frequency")
    table.add_column("Active")
    for template in templates:
        table.add_row(
            template.id,
            template.name,
            template.category,
            template.frequency,
            "yes" if template.active else "no",
        )
    state.console.print(table)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List care templates."""
    state = get_state(ctx)
    try:
        templates = _store(state).list()
    except TemplateError as exc:
        fail(state, str(exc))
    _show(state, templates)


@app.command("add")
def add_command(
    ctx: typer.Context,
    name: str = typer.Option(..., help="Template name"),
    category: str = typer.Option("exercise", help="Category: exercise|food"),
    frequency: str = typer.Option(..., help="How often, e.g. '3 times a week'"),
    inactive: bool = typer.Option(False, "--inactive", help="Create the template switched off"),
) -> None:
    """Create a care template."""
    state = get_state(ctx)
    try:
        template = _store(state).add(name, category, frequency, active=not inactive)
    except TemplateError as exc:
        fail(state, str(exc))
    _show(state, [template], action="created")


@app.command("edit")
def edit_command(
    ctx: typer.Context,
    template_id: str = typer.Argument(..., help="Template ID"),
    name: Optional[str] = typer.Option(None, help="New name"),
    category: Optional[str] = typer.Option(None, help="New category: exercise|food"),
    frequency: Optional[str] = typer.Option(None, help="New frequency"),
) -> None:
    """Update fields of a care template."""
    state = get_state(ctx)
    try:
        template = _store(state).update(template_id, name=name, category=category, frequency=frequency)
    except TemplateError as exc:
        fail(state, str(exc))
    _show(state, [template], action="updated")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    template_id: str = typer.Argument(..., help="Template ID"),
) -> None:
    """Delete a care template."""
    state = get_state(ctx)
    try:
        template = _store(state).delete(template_id)
    except TemplateError as exc:
        fail(state, str(exc))
    _show(state, [template], action="deleted")


@app.command("toggle")
def toggle_command(
    ctx: typer.Context,
    template_id: str = typer.Argument(..., help="Template ID"),
) -> None:
    """Switch a care template on or off."""
    state = get_state(ctx)
    try:
        template = _store(state).toggle(template_id)
    except TemplateError as exc:
        fail(state, str(exc))
    _show(state, [template], action="activated" if template.active else "deactivated")
