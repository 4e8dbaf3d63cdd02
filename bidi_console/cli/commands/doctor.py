"""Doctor command: check that a BiDi run can work on this machine."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from ...config import CONFIG_FILE, HarnessConfig
from ...exceptions import BrowserNotAvailableError
from ...services.browser_session import locate_browser
from ..utils import console


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON config file (default: ~/.bidi-console/config.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show the effective configuration")
def doctor(config_path: Optional[Path], verbose: bool):
    """Diagnose browser discovery and configuration.

    \b
    Checks:
      • Python version
      • Configuration file
      • Firefox and geckodriver (or the remote server when one is configured)
    """
    console.print(
        Panel.fit(
            "[bold blue]bidi-console doctor[/bold blue]\nRunning diagnostic checks...",
            border_style="blue",
        )
    )

    results = [_check_python()]
    config_result, config = _check_configuration(config_path or CONFIG_FILE)
    results.append(config_result)
    results.append(_check_browser(config))

    _display_results(results)
    if verbose:
        _display_config(config)

    failed = sum(1 for r in results if r["status"] == "fail")
    warnings = sum(1 for r in results if r["status"] == "warning")
    passed = len(results) - failed - warnings
    console.print(
        f"\n[bold]Summary:[/bold] {passed} passed, {warnings} warnings, {failed} failed"
    )
    if failed:
        sys.exit(1)
    console.print("[green]✓ Ready to run[/green]")


def _check_python() -> dict:
    version = ".".join(str(v) for v in sys.version_info[:3])
    if sys.version_info < (3, 9):
        return {"name": "Python", "status": "fail", "message": f"{version} (need 3.9+)"}
    return {"name": "Python", "status": "pass", "message": version}


def _check_configuration(path: Path):
    if not path.exists():
        return (
            {
                "name": "Configuration",
                "status": "warning",
                "message": f"{path} not found (using defaults)",
            },
            HarnessConfig.load(path),
        )
    try:
        config = HarnessConfig.load(path)
    except (ValueError, json.JSONDecodeError) as e:
        return (
            {"name": "Configuration", "status": "fail", "message": f"Invalid: {e}"},
            HarnessConfig.from_env(),
        )
    return (
        {"name": "Configuration", "status": "pass", "message": f"Valid config at {path}"},
        config,
    )


def _check_browser(config: HarnessConfig) -> dict:
    if config.remote_url:
        return {
            "name": "Browser",
            "status": "pass",
            "message": f"Remote WebDriver at {config.remote_url}",
        }
    try:
        paths = locate_browser(config.browser_binary)
    except BrowserNotAvailableError as e:
        return {"name": "Browser", "status": "fail", "message": str(e)}
    return {
        "name": "Browser",
        "status": "pass",
        "message": f"{paths['browser_path']} (driver: {paths.get('driver_path') or 'n/a'})",
    }


def _display_results(results: list) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Check", style="cyan", width=16)
    table.add_column("Status", width=10)
    table.add_column("Details")

    for r in results:
        status_icon = {
            "pass": "[green]✓ PASS[/green]",
            "warning": "[yellow]⚠ WARN[/yellow]",
            "fail": "[red]✗ FAIL[/red]",
        }.get(r["status"], "?")
        table.add_row(r["name"], status_icon, r["message"])

    console.print(table)


def _display_config(config: HarnessConfig) -> None:
    table = Table(show_header=True, header_style="bold", title="Effective configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in config.to_dict().items():
        shown = str(value)
        if len(shown) > 60:
            shown = shown[:57] + "..."
        table.add_row(name, shown)
    console.print(table)
