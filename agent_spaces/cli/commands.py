"""CLI commands for agent-spaces."""

from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from agent_spaces import __version__

app = typer.Typer(
    name="agent_spaces",
    help="agent-spaces - workspaces with side-by-side CLI agents",
    no_args_is_help=True,
)
workspaces_app = typer.Typer(help="Manage stored workspaces.", no_args_is_help=True)
models_app = typer.Typer(help="Manage launcher model presets.", no_args_is_help=True)
app.add_typer(workspaces_app, name="workspaces")
app.add_typer(models_app, name="models")
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"agent-spaces v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """agent-spaces entrypoint."""
    del version


def _open_store():
    from agent_spaces.config.loader import load_config
    from agent_spaces.session.workspace_store import WorkspaceStore

    config = load_config()
    return config, WorkspaceStore(config.storage_path)


@app.command()
def gui() -> None:
    """Start the agent-spaces desktop window."""
    from agent_spaces.config.loader import load_config, save_config
    from agent_spaces.gui.app import run_app
    from agent_spaces.utils.log import setup_logging

    config = load_config()
    setup_logging(config.log_level, config.log_path)

    console.print("Starting agent-spaces")
    console.print(f"Storage: [cyan]{config.storage_path}[/cyan]")
    console.print(f"Focus mode: [cyan]{config.gui.focus_mode.value}[/cyan]")

    try:
        run_app(config, save_config=save_config)
    except KeyboardInterrupt:
        pass
    finally:
        # PTY reader threads are daemons, but pexpect close helpers may still be winding down.
        os._exit(0)


@app.command()
def status() -> None:
    """Show configuration and storage status."""
    from agent_spaces.config.loader import get_config_path, load_config

    config = load_config()
    config_path = get_config_path()
    storage = config.storage_path
    storage_existed = storage.exists()
    _, store = _open_store()

    console.print("agent-spaces Status\n")
    console.print(f"Config: {config_path} {'[green]OK[/green]' if config_path.exists() else '[red]NO[/red]'}")
    console.print(f"Storage: {storage} {'[green]OK[/green]' if storage_existed else '[yellow]created[/yellow]'}")
    console.print(f"Shell: [cyan]{os.environ.get('SHELL') or config.terminal.default_shell}[/cyan]")
    console.print(
        f"GUI: {config.gui.width}x{config.gui.height}, font {config.gui.font_size}, "
        f"theme {config.gui.theme}, focus {config.gui.focus_mode.value}"
    )
    console.print(
        f"Injection delays: settle {config.terminal.settle_delay_s}s, launch {config.terminal.launch_delay_s}s"
    )
    console.print(f"Workspaces: [cyan]{len(store.workspaces)}[/cyan]")
    console.print(f"Model presets: [cyan]{len(store.model_configs)}[/cyan]")


# ---------------------------------------------------------------------------
# workspaces
# ---------------------------------------------------------------------------

@workspaces_app.command("list")
def workspaces_list() -> None:
    """List stored workspaces and their projects."""
    _, store = _open_store()
    if not store.workspaces:
        console.print("[dim]No workspaces yet. Add one with `agent-spaces workspaces add PATH`.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Projects")
    table.add_column("Root")
    table.add_column("ID", style="dim")
    for workspace in store.workspaces:
        extra = len(workspace.additional_projects)
        table.add_row(workspace.name, str(1 + extra), workspace.root_path, workspace.id)
    console.print(table)


@workspaces_app.command("add")
def workspaces_add(
    path: Path = typer.Argument(..., help="Root folder of the workspace."),
    name: str = typer.Option("", "--name", "-n", help="Display name (defaults to the folder name)."),
) -> None:
    """Create a workspace rooted at PATH."""
    from agent_spaces.session.workspace_store import Workspace

    root = path.expanduser().resolve()
    if not root.is_dir():
        console.print(f"[red]Not a directory: {root}[/red]")
        raise typer.Exit(1)

    _, store = _open_store()
    workspace = Workspace(root_path=str(root))
    if name:
        workspace.rename(name)
    store.add_workspace(workspace)
    console.print(f"[green]OK[/green] Added workspace [cyan]{workspace.name}[/cyan] ({workspace.id})")


@workspaces_app.command("remove")
def workspaces_remove(
    key: str = typer.Argument(..., help="Workspace id or name."),
) -> None:
    """Delete a stored workspace (folders on disk are untouched)."""
    _, store = _open_store()
    matches = [w for w in store.workspaces if key in (w.id, w.name)]
    if not matches:
        console.print(f"[red]No workspace matches '{key}'.[/red]")
        raise typer.Exit(1)
    if len(matches) > 1:
        console.print(f"[yellow]'{key}' matches {len(matches)} workspaces; use the id instead.[/yellow]")
        raise typer.Exit(1)
    store.delete_workspace(matches[0].id)
    console.print(f"[green]OK[/green] Removed workspace [cyan]{matches[0].name}[/cyan]")


# ---------------------------------------------------------------------------
# models
# ---------------------------------------------------------------------------

@models_app.command("list")
def models_list() -> None:
    """List launcher model presets in shortcut order."""
    _, store = _open_store()
    table = Table(show_header=True, header_style="bold")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("New")
    table.add_column("Resume")
    table.add_column("Color", style="dim")
    for model in store.model_configs:
        new_command = model.new_command or "[dim]shell[/dim]"
        resume_command = model.resume_command or "[dim]-[/dim]"
        table.add_row(model.shortcut or "-", model.name, new_command, resume_command, f"#{model.color_hex}")
    console.print(table)


@models_app.command("reset")
def models_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the default model presets."""
    _, store = _open_store()
    if not yes and not typer.confirm("Replace all model presets with the defaults?"):
        raise typer.Exit()
    store.reset_model_configs()
    console.print(f"[green]OK[/green] Restored {len(store.model_configs)} default presets")


if __name__ == "__main__":
    app()
