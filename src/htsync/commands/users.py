"""User credential commands: sync, add, remove, reset, passwd, list, status."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

import typer
from rich.console import Console
from rich.table import Table

from htsync_common import Role, UserRecord

from htsync.config import get_config
from htsync.engine import SyncEngine, build_directory, build_engine
from htsync.errors import HtsyncError

console = Console()


def _engine() -> SyncEngine:
    return build_engine(get_config())


@contextmanager
def _handle_errors() -> Generator[None, None, None]:
    try:
        yield
    except HtsyncError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(exc.exit_code)


def _report_reload(reloaded: bool, reload_error: str | None) -> None:
    if reloaded:
        console.print("[green]NGINX reloaded[/green]")
    elif reload_error:
        console.print(f"[yellow]Credentials written but NGINX reload failed:[/yellow] {reload_error}")


def sync_all() -> None:
    """Sync every directory user into the htpasswd partitions."""
    cfg = get_config()
    with _handle_errors():
        engine = build_engine(cfg)
        report = engine.sync_directory(build_directory(cfg))

    for outcome in report.outcomes:
        if outcome.ok:
            console.print(f"  [green]✓[/green] {outcome.identity}")
        else:
            console.print(f"  [red]✗[/red] {outcome.identity}: {outcome.error}")
    console.print(f"\nSync complete: [green]{report.success} success[/green], [red]{report.errors} errors[/red]")
    _report_reload(report.reloaded, report.reload_error)
    if report.errors:
        raise typer.Exit(1)


def add(
    email: str = typer.Argument(..., help="User identity (email address)"),
    role: Role = typer.Option(Role.USER, help="Role to grant"),
    name: str = typer.Option("", help="Display name"),
) -> None:
    """Add or re-sync a single user and issue a temporary password."""
    with _handle_errors():
        try:
            record = UserRecord(identity=email, role=role, display_name=name)
        except ValueError as exc:
            raise HtsyncError(str(exc), exit_code=2) from exc
        result = _engine().sync_user(record)

    verb = "Added" if result.is_new_user else "Updated"
    console.print(f"[green]{verb} {result.role.value}:[/green] {result.identity}")
    console.print(f"Temporary password: [bold]{result.temp_secret}[/bold]")
    if not result.notified:
        console.print("[yellow]Notification was not delivered[/yellow]")
    _report_reload(result.reloaded, result.reload_error)


def remove(
    email: str = typer.Argument(..., help="User identity (email address)"),
) -> None:
    """Remove a user from both the user and admin partitions."""
    with _handle_errors():
        result = _engine().remove_user(email)

    if result.found:
        console.print(f"[green]Removed user:[/green] {email}")
    else:
        console.print(f"[yellow]User not found:[/yellow] {email}")
    _report_reload(result.reloaded, result.reload_error)


def reset(
    email: str = typer.Argument(..., help="User identity (email address)"),
) -> None:
    """Issue a new temporary password for an existing user."""
    with _handle_errors():
        result = _engine().reset_password(email)

    console.print(f"[green]Password reset for {result.identity}[/green] ({result.role.value})")
    console.print(f"Temporary password: [bold]{result.temp_secret}[/bold]")
    _report_reload(result.reloaded, result.reload_error)


def passwd(
    email: str = typer.Argument(..., help="User identity (email address)"),
    old_password: str = typer.Option(..., prompt="Temporary password", hide_input=True),
    new_password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
) -> None:
    """Replace a temporary password with a new one."""
    with _handle_errors():
        result = _engine().change_own_password(email, old_password, new_password)

    console.print(f"[green]Password changed for {result.identity}[/green]")
    _report_reload(result.reloaded, result.reload_error)


def list_users() -> None:
    """List users in the htpasswd partitions."""
    with _handle_errors():
        accounts = _engine().list_accounts()

    if not accounts:
        console.print("No users found.")
        return

    table = Table(title="NGINX users")
    table.add_column("#", justify="right")
    table.add_column("Identity", style="cyan")
    table.add_column("Role", style="green")
    table.add_column("Access")

    for index, account in enumerate(accounts, start=1):
        role = account.role.value if account.role else "-"
        access = "yes" if account.has_access else "[red]no[/red]"
        table.add_row(str(index), account.identity, role, access)

    console.print(table)


def status(
    email: str = typer.Argument(..., help="User identity (email address)"),
) -> None:
    """Show the role and access of a single user."""
    with _handle_errors():
        result = _engine().user_status(email)

    if not result.has_access:
        console.print(f"[yellow]{email} has no NGINX access[/yellow]")
        raise typer.Exit(1)
    console.print(f"{email}: [green]{result.role.value}[/green]")
