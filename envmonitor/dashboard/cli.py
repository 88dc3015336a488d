from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console

from envmonitor.config import settings
from envmonitor.dashboard.api_client import EnvironmentApiClient
from envmonitor.dashboard.forms import EnvironmentForm
from envmonitor.dashboard.state import EnvironmentStateCache
from envmonitor.dashboard.views import render_card, render_grid

app = typer.Typer(help="Environment Monitor dashboard.")
console = Console()

STATUS_HELP = "One of: working, degraded, down."


@app.callback()
def main_callback(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help="Backend base URL (default from DASHBOARD_API_URL).",
    ),
) -> None:
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    # Tests and embedders may hand in a ready cache through ctx.obj
    if ctx.obj is None:
        api = EnvironmentApiClient(base_url=api_url or settings.dashboard_api_url)
        ctx.call_on_close(api.close)
        ctx.obj = EnvironmentStateCache(api)


def _load(cache: EnvironmentStateCache) -> None:
    if not cache.load():
        console.print("[red]Could not load environments from the API.[/red]")
        raise typer.Exit(code=1)


def _report_errors(form: EnvironmentForm) -> None:
    for field_name, message in form.errors.items():
        console.print(f"[red]{field_name}: {message}[/red]")


@app.command()
def info() -> None:
    """
    Show effective dashboard configuration.
    """
    typer.echo(f"API={settings.dashboard_api_url} | timeout={settings.dashboard_timeout_s}s")


@app.command("list")
def list_environments(ctx: typer.Context) -> None:
    """
    Show all environments as a grid with status counts.
    """
    cache: EnvironmentStateCache = ctx.obj
    _load(cache)
    console.print(render_grid(cache.snapshot))


@app.command()
def show(ctx: typer.Context, environment_id: str = typer.Argument(..., help="Environment id.")) -> None:
    """
    Show a single environment card.
    """
    cache: EnvironmentStateCache = ctx.obj
    _load(cache)
    environment = cache.get_by_id(environment_id)
    if environment is None:
        console.print(f"[red]Environment {environment_id} not found.[/red]")
        raise typer.Exit(code=1)
    console.print(render_card(environment))


@app.command()
def add(
    ctx: typer.Context,
    url: str = typer.Option(..., "--url", "-u", help="IP address or URL."),
    status: str = typer.Option("working", "--status", "-s", help=STATUS_HELP),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    version: Optional[str] = typer.Option(None, "--version", "-v"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """
    Create a new environment.
    """
    cache: EnvironmentStateCache = ctx.obj
    form = EnvironmentForm(url=url, status=status, name=name or "", version=version or "", notes=notes or "")
    console.rule(form.title)
    record = form.submit()
    if record is None:
        _report_errors(form)
        raise typer.Exit(code=2)

    created = cache.create(record)
    if created is None:
        console.print("[red]Failed to create environment.[/red]")
        raise typer.Exit(code=1)
    console.print(render_card(created))


@app.command()
def edit(
    ctx: typer.Context,
    environment_id: str = typer.Argument(..., help="Environment id."),
    url: Optional[str] = typer.Option(None, "--url", "-u"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help=STATUS_HELP),
    name: Optional[str] = typer.Option(None, "--name", "-n", help='Pass "" to clear.'),
    version: Optional[str] = typer.Option(None, "--version", "-v", help='Pass "" to clear.'),
    notes: Optional[str] = typer.Option(None, "--notes", help='Pass "" to clear.'),
) -> None:
    """
    Edit an existing environment; options left out keep their current value.
    """
    cache: EnvironmentStateCache = ctx.obj
    _load(cache)
    environment = cache.get_by_id(environment_id)
    if environment is None:
        console.print(f"[red]Environment {environment_id} not found.[/red]")
        raise typer.Exit(code=1)

    form = EnvironmentForm.from_environment(environment)
    for field_name, value in (("url", url), ("status", status), ("name", name), ("version", version), ("notes", notes)):
        if value is not None:
            setattr(form, field_name, value)

    console.rule(form.title)
    record = form.submit()
    if record is None:
        _report_errors(form)
        raise typer.Exit(code=2)

    updated = cache.update(environment_id, record)
    if updated is None:
        console.print("[red]Failed to update environment.[/red]")
        raise typer.Exit(code=1)
    console.print(render_card(updated))


@app.command()
def delete(
    ctx: typer.Context,
    environment_id: str = typer.Argument(..., help="Environment id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Delete an environment.
    """
    cache: EnvironmentStateCache = ctx.obj
    if not yes:
        typer.confirm(f"Delete environment {environment_id}?", abort=True)
    if not cache.delete(environment_id):
        console.print(f"[red]Failed to delete environment {environment_id}.[/red]")
        raise typer.Exit(code=1)
    console.print(f"Deleted {environment_id}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
