"""Command line entry point for skillkit."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from skillkit.config import Config, get_config, set_config
from skillkit.eligibility import should_include_skill
from skillkit.install import install_skill, list_install_options
from skillkit.logging import configure_logging
from skillkit.snapshot import build_workspace_skills_prompt
from skillkit.sources import load_workspace_skill_entries

cli = typer.Typer(help="skillkit - resolve, filter and install agent skills")
console = Console()


def _setup(config: str, verbose: bool) -> Config:
    cfg = Config.from_yaml(config) if config else get_config()
    if verbose:
        cfg.logging.level = "DEBUG"
    set_config(cfg)
    configure_logging(cfg)
    return cfg


@cli.command("list")
def list_skills(
    workspace: Path = typer.Option(Path("."), "-w", "--workspace", help="Workspace directory"),
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Show discovered skills, their eligibility and installers."""
    cfg = _setup(config, verbose)
    entries = load_workspace_skill_entries(workspace, cfg)
    if not entries:
        console.print("[yellow]No skills found.[/yellow]")
        return

    table = Table(title="Skills")
    table.add_column("Name", style="cyan")
    table.add_column("Source")
    table.add_column("Eligible")
    table.add_column("Installers")
    for entry in sorted(entries, key=lambda item: item.name.lower()):
        eligible = should_include_skill(entry, cfg)
        installers = ", ".join(install_id for install_id, _ in list_install_options(entry))
        table.add_row(
            entry.name,
            entry.skill.source,
            "[green]yes[/green]" if eligible else "[red]no[/red]",
            installers or "-",
        )
    console.print(table)


@cli.command()
def prompt(
    workspace: Path = typer.Option(Path("."), "-w", "--workspace", help="Workspace directory"),
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Print the prompt block for eligible skills."""
    cfg = _setup(config, verbose)
    print(build_workspace_skills_prompt(workspace, cfg))


@cli.command()
def install(
    skill_name: str = typer.Argument(..., help="Skill name"),
    install_id: str = typer.Argument(..., help="Installer id, e.g. brew-0"),
    workspace: Path = typer.Option(Path("."), "-w", "--workspace", help="Workspace directory"),
    timeout: Optional[int] = typer.Option(None, "-t", "--timeout", help="Timeout in seconds"),
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Install a dependency declared by a skill."""
    cfg = _setup(config, verbose)
    result = asyncio.run(
        install_skill(workspace, skill_name, install_id, cfg=cfg, timeout_seconds=timeout)
    )
    if result.command:
        console.print(f"Command: {result.command}")
    if result.stdout:
        console.print(result.stdout, markup=False)
    if result.stderr:
        console.print(result.stderr, style="dim", markup=False)
    if not result.ok:
        console.print(f"[red]{result.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{result.message}[/green]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
