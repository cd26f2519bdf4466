from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.table import Table

from dotdeploy.config import SETTINGS_PATH
from dotdeploy.logging_utils import configure_logging
from dotdeploy.models import DeploySettings
from dotdeploy.runner import RunnerError
from dotdeploy.service import (
    CHEZMOI_COMMANDS,
    DeployService,
    NotARepositoryError,
    ServiceError,
)
from dotdeploy.settings import SettingsError, load_settings, resolve, write_settings

app = typer.Typer(help="dotdeploy: deploy chezmoi-managed dotfiles into ~/.config")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands instead of running them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        level = logging.DEBUG
    elif dry_run:
        level = logging.INFO
    else:
        level = logging.WARNING
    configure_logging(level)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    ctx.obj = {"dry_run": dry_run}


def _service(ctx: typer.Context) -> DeployService:
    state = ctx.find_root().obj
    service = state.get("service")
    if service is None:
        try:
            settings = resolve(load_settings(SETTINGS_PATH))
        except SettingsError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
        service = DeployService(settings, dry_run=state["dry_run"])
        state["service"] = service
    return service


def _run_chezmoi(ctx: typer.Context, name: str) -> None:
    service = _service(ctx)
    console.print(service.announcement(name))
    try:
        code = service.run(name)
    except (RunnerError, ServiceError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=code)


@app.command("init", help=CHEZMOI_COMMANDS["init"].help)
def init(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "init")


@app.command("add", help=CHEZMOI_COMMANDS["add"].help)
def add(
    ctx: typer.Context,
    target: str | None = typer.Argument(None, help="File to add"),
) -> None:
    if not target:
        console.print("[red]Error: No file specified[/red]")
        typer.echo(ctx.find_root().get_help())
        raise typer.Exit(code=1)

    service = _service(ctx)
    console.print(service.announcement("add", target))
    try:
        code = service.add(target)
    except (RunnerError, ServiceError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=code)


@app.command("apply", help=CHEZMOI_COMMANDS["apply"].help)
def apply(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "apply")


@app.command("diff", help=CHEZMOI_COMMANDS["diff"].help)
def diff(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "diff")


@app.command("status", help=CHEZMOI_COMMANDS["status"].help)
def status(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "status")


@app.command("update", help=CHEZMOI_COMMANDS["update"].help)
def update(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "update")


@app.command("init-apply", help=CHEZMOI_COMMANDS["init-apply"].help)
def init_apply(ctx: typer.Context) -> None:
    _run_chezmoi(ctx, "init-apply")


@app.command("sync")
def sync(
    ctx: typer.Context,
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
) -> None:
    """Run git add, commit and push (if in git repo)."""
    service = _service(ctx)

    def read_message() -> str:
        if message is not None:
            return message
        return typer.prompt("Commit message", default="", show_default=False)

    try:
        code = service.sync(read_message, announce=console.print)
    except NotARepositoryError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(code=0) from exc
    except (RunnerError, ServiceError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=code)


@app.command("doctor")
def doctor(ctx: typer.Context) -> None:
    """Run basic local health checks."""
    failures = _service(ctx).doctor()
    if failures:
        for failure in failures:
            console.print(f"[red]- {failure}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]doctor checks passed[/green]")


@app.command("settings-init")
def settings_init() -> None:
    """Write default settings if missing."""
    if SETTINGS_PATH.exists():
        console.print(f"[yellow]Settings already exist:[/yellow] {SETTINGS_PATH}")
        raise typer.Exit(code=0)

    write_settings(SETTINGS_PATH, DeploySettings())
    console.print(f"[green]Settings created:[/green] {SETTINGS_PATH}")


@app.command("show-settings")
def show_settings(ctx: typer.Context) -> None:
    """Show the resolved settings."""
    settings = _service(ctx).settings
    table = Table(title=str(SETTINGS_PATH))
    table.add_column("key")
    table.add_column("value")
    table.add_row("source", str(settings.source))
    table.add_row("destination", str(settings.destination))
    table.add_row("mode", settings.mode)
    table.add_row("chezmoi", settings.chezmoi_bin)
    table.add_row("git", settings.git_bin)
    table.add_row("remote", settings.remote or "-")
    table.add_row("branch", settings.branch or "-")
    console.print(table)


if __name__ == "__main__":
    app()
