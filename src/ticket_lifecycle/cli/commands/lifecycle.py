"""Lifecycle administration commands.

Commands:
    lifecycle list            -- List configured lifecycles
    lifecycle show            -- Show statuses, defaults and transitions
    lifecycle transitions     -- List legal next statuses
    lifecycle check-right     -- Resolve the right required for a move
    lifecycle actions         -- List UI actions available from a status
    lifecycle create          -- Create a new lifecycle
    lifecycle set-statuses    -- Replace the statuses of a lifecycle
    lifecycle add-transition  -- Allow moves from one status to others
    lifecycle set-map         -- Map statuses between two lifecycles
    lifecycle unmapped        -- Lifecycle pairs without a usable map
    lifecycle rights          -- Rights defined by transitions
    lifecycle localize        -- Strings that need translation
    lifecycle configure       -- Show or change the project lifecycle settings
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from ticket_lifecycle.lifecycles import (
    Lifecycle,
    LifecycleError,
    LifecycleRegistry,
    for_localization,
    load_lifecycle_config,
    open_project_registry,
    require_repo_root,
    rights_description,
    update_lifecycle_config,
)

logger = logging.getLogger(__name__)

app = typer.Typer(help="Ticket lifecycle commands")
console = Console(width=120)


def _print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _registry() -> LifecycleRegistry:
    return open_project_registry(require_repo_root())


def _load(registry: LifecycleRegistry, name: str) -> Lifecycle:
    lifecycle = registry.load(name) if name else None
    if lifecycle is None:
        raise LifecycleError(f"Lifecycle '{name}' is not configured")
    return lifecycle


def _finish(ok: bool, message: str) -> None:
    if not ok:
        raise LifecycleError(message)
    typer.secho(message, fg=typer.colors.GREEN)


def _parse_pairs(values: list[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw in values:
        if "=" not in raw:
            raise LifecycleError(f"Invalid mapping '{raw}'. Expected status=target")
        key, value = raw.split("=", 1)
        if not key.strip():
            raise LifecycleError(f"Invalid mapping '{raw}'. Expected status=target")
        parsed[key.strip()] = value.strip()
    return parsed


def _run_or_exit(fn):
    try:
        return fn()
    except (LifecycleError, RuntimeError, ValueError) as exc:
        logger.debug("Lifecycle command failed", exc_info=True)
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


@app.command("list")
def list_command(as_json: bool = typer.Option(False, "--json", help="Render lifecycle names as JSON")) -> None:
    """List configured lifecycles."""

    def _run() -> None:
        names = _registry().list()
        if as_json:
            _print_json({"lifecycles": names})
            return
        if not names:
            typer.echo("No lifecycles configured")
            return
        for name in names:
            typer.echo(f"- {name}")

    _run_or_exit(_run)


@app.command("show")
def show_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    as_json: bool = typer.Option(False, "--json", help="Render lifecycle as JSON"),
) -> None:
    """Show statuses, defaults and transitions of a lifecycle."""

    def _run() -> None:
        lifecycle = _load(_registry(), name)
        if as_json:
            _print_json(
                {
                    "name": lifecycle.name,
                    "initial": lifecycle.initial(),
                    "active": lifecycle.active(),
                    "inactive": lifecycle.inactive(),
                    "default_initial": lifecycle.default_initial(),
                    "default_inactive": lifecycle.default_inactive(),
                    "transitions": lifecycle.transitions(),
                }
            )
            return

        table = Table(title=f"Lifecycle: {lifecycle.name}")
        table.add_column("Status", style="cyan")
        table.add_column("Type", style="magenta")
        table.add_column("Next statuses")
        for status in lifecycle.valid():
            table.add_row(
                status,
                lifecycle.status_type(status),
                ", ".join(lifecycle.transitions(status)) or "-",
            )
        console.print(table)
        console.print(f"Default initial: {lifecycle.default_initial() or '-'}")
        console.print(f"Default inactive: {lifecycle.default_inactive() or '-'}")

    _run_or_exit(_run)


@app.command("transitions")
def transitions_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    status: Optional[str] = typer.Argument(None, help="Status to list next statuses for"),
) -> None:
    """List legal next statuses for a status, or every transition."""

    def _run() -> None:
        lifecycle = _load(_registry(), name)
        if status:
            for target in lifecycle.transitions(status):
                typer.echo(target)
            return
        for source, targets in lifecycle.transitions().items():
            typer.echo(f"{source} -> {', '.join(targets)}")

    _run_or_exit(_run)


@app.command("check-right")
def check_right_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    from_status: str = typer.Argument(..., help="Current status"),
    to_status: str = typer.Argument(..., help="Next status"),
) -> None:
    """Print the right required to move from one status to another."""

    def _run() -> None:
        typer.echo(_load(_registry(), name).check_right(from_status, to_status))

    _run_or_exit(_run)


@app.command("actions")
def actions_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    from_status: str = typer.Argument(..., help="Current status"),
    as_json: bool = typer.Option(False, "--json", help="Render actions as JSON"),
) -> None:
    """List UI actions available from a status."""

    def _run() -> None:
        actions = _load(_registry(), name).actions(from_status)
        if as_json:
            _print_json({"actions": [entry.to_dict() for entry in actions]})
            return
        if not actions:
            typer.echo(f"No actions from '{from_status}'")
            return
        table = Table()
        table.add_column("From")
        table.add_column("To", style="cyan")
        table.add_column("Label")
        table.add_column("Update")
        for entry in actions:
            table.add_row(entry.from_status, entry.to_status, entry.label, entry.update or "-")
        console.print(table)

    _run_or_exit(_run)


@app.command("create")
def create_command(
    name: str = typer.Argument(..., help="New lifecycle name"),
    initial: list[str] = typer.Option([], "--initial", help="Initial status (repeatable)"),
    active: list[str] = typer.Option([], "--active", help="Active status (repeatable)"),
    inactive: list[str] = typer.Option([], "--inactive", help="Inactive status (repeatable)"),
    default_initial: Optional[str] = typer.Option(None, "--default-initial", help="Default initial status"),
    default_inactive: Optional[str] = typer.Option(None, "--default-inactive", help="Default inactive status"),
) -> None:
    """Create a new lifecycle."""

    def _run() -> None:
        ok, message = _registry().create_lifecycle(
            name,
            initial=initial,
            active=active,
            inactive=inactive,
            default_initial=default_initial,
            default_inactive=default_inactive,
        )
        _finish(ok, message)

    _run_or_exit(_run)


@app.command("set-statuses")
def set_statuses_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    initial: list[str] = typer.Option([], "--initial", help="Initial status (repeatable)"),
    active: list[str] = typer.Option([], "--active", help="Active status (repeatable)"),
    inactive: list[str] = typer.Option([], "--inactive", help="Inactive status (repeatable)"),
) -> None:
    """Replace all statuses of a lifecycle."""

    def _run() -> None:
        lifecycle = _load(_registry(), name)
        _finish(*lifecycle.set_statuses(initial=initial, active=active, inactive=inactive))

    _run_or_exit(_run)


@app.command("add-transition")
def add_transition_command(
    name: str = typer.Argument(..., help="Lifecycle name"),
    from_status: str = typer.Argument(..., help="Current status"),
    to_statuses: list[str] = typer.Argument(..., help="Statuses that become reachable"),
) -> None:
    """Allow moving from one status to one or more others."""

    def _run() -> None:
        lifecycle = _load(_registry(), name)
        transitions = lifecycle.transitions()
        targets = transitions.setdefault(from_status, [])
        for target in to_statuses:
            if target.lower() not in {existing.lower() for existing in targets}:
                targets.append(target)
        _finish(*lifecycle.set_transitions(transitions))

    _run_or_exit(_run)


@app.command("set-map")
def set_map_command(
    from_name: str = typer.Argument(..., help="Lifecycle tickets move from"),
    to_name: str = typer.Argument(..., help="Lifecycle tickets move to"),
    pairs: list[str] = typer.Argument(..., help="Status mappings: status=target"),
) -> None:
    """Map statuses of one lifecycle onto another."""

    def _run() -> None:
        lifecycle = _load(_registry(), from_name)
        _finish(*lifecycle.set_map(to_name, _parse_pairs(pairs)))

    _run_or_exit(_run)


@app.command("unmapped")
def unmapped_command(as_json: bool = typer.Option(False, "--json", help="Render pairs as JSON")) -> None:
    """List lifecycle pairs that have no usable status map."""

    def _run() -> None:
        pairs = _registry().unmapped_lifecycle_pairs()
        if as_json:
            _print_json({"unmapped": [list(pair) for pair in pairs]})
            return
        if not pairs:
            typer.echo("Every lifecycle pair is mapped")
            return
        for from_name, to_name in pairs:
            typer.echo(f"{from_name} -> {to_name}")

    _run_or_exit(_run)


@app.command("rights")
def rights_command(as_json: bool = typer.Option(False, "--json", help="Render rights as JSON")) -> None:
    """List rights required by lifecycle transitions."""

    def _run() -> None:
        rights = rights_description(_registry())
        if as_json:
            _print_json({"rights": rights})
            return
        table = Table(title="Lifecycle rights")
        table.add_column("Right", style="cyan")
        table.add_column("Description")
        for right, description in rights.items():
            table.add_row(right, description)
        console.print(table)

    _run_or_exit(_run)


@app.command("localize")
def localize_command(as_json: bool = typer.Option(False, "--json", help="Render strings as JSON")) -> None:
    """Print strings introduced by lifecycles that need translation."""

    def _run() -> None:
        strings = for_localization(_registry())
        if as_json:
            _print_json({"strings": strings})
            return
        for value in strings:
            typer.echo(value)

    _run_or_exit(_run)


@app.command("configure")
def configure_command(
    store_path: Optional[str] = typer.Option(
        None, "--store-path", help="Lifecycle file, relative to .tickets/ unless absolute"
    ),
    register: Optional[bool] = typer.Option(
        None,
        "--register-rights/--no-register-rights",
        help="Register lifecycle rights in the permission catalog",
    ),
    as_json: bool = typer.Option(False, "--json", help="Render the saved configuration as JSON"),
) -> None:
    """Show or change where this project keeps its lifecycles."""

    def _run() -> None:
        repo_root = require_repo_root()
        if store_path is None and register is None:
            config = load_lifecycle_config(repo_root)
        else:
            config = update_lifecycle_config(
                repo_root, store_path=store_path, register_rights=register
            )
        if as_json:
            _print_json({"lifecycles": config.to_dict()})
            return
        if store_path is not None or register is not None:
            typer.secho("Lifecycle configuration saved", fg=typer.colors.GREEN)
        typer.echo(f"- store_path: {config.store_path}")
        typer.echo(f"- register_rights: {'yes' if config.register_rights else 'no'}")

    _run_or_exit(_run)
