"""Run command: execute the two-tab console correlation scenario."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from ...config import HarnessConfig, configure_logging
from ...exceptions import CorrelationFailure
from ...models import ConsoleLogEntry
from ...scenario import run_scenario
from ..utils import EXIT_ASSERTION_FAILURE, EXIT_PASS, EXIT_TEST_ERROR, console


@click.command()
@click.option("--url", "page_url", help="Page to load in both tabs")
@click.option("--element-id", help="Id of the element to click")
@click.option("--expected-text", help="Console text the main tab should log")
@click.option("--timeout", type=float, help="Seconds to wait for the entry")
@click.option(
    "--isolation-window",
    type=float,
    help="Seconds to watch for leaks after the secondary tab click (0 disables)",
)
@click.option("--browser", "browser_binary", help="Firefox binary to launch")
@click.option("--remote-url", help="Run on a remote WebDriver server, e.g. a Selenium Grid")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON config file (default: ~/.bidi-console/config.json)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def run(
    page_url: Optional[str],
    element_id: Optional[str],
    expected_text: Optional[str],
    timeout: Optional[float],
    isolation_window: Optional[float],
    browser_binary: Optional[str],
    remote_url: Optional[str],
    headed: bool,
    config_path: Optional[Path],
    debug: bool,
):
    """Open two tabs and check that only the main tab's console entry is seen.

    \b
    Exit codes:
      0  entry captured and verified
      1  assertion failure (timeout, leak, unexpected entry)
      2  test error (browser, navigation, element lookup)
    """
    try:
        config = HarnessConfig.load(config_path)
    except ValueError as e:
        console.print(f"[red]✗ Invalid configuration: {e}[/red]")
        sys.exit(EXIT_TEST_ERROR)

    config = config.with_overrides(
        page_url=page_url,
        element_id=element_id,
        expected_text=expected_text,
        timeout=timeout,
        isolation_window=isolation_window,
        browser_binary=browser_binary,
        remote_url=remote_url,
        headless=False if headed else None,
        log_level="DEBUG" if debug else None,
    )
    log = configure_logging(config.log_level)

    try:
        entry = asyncio.run(run_scenario(config, log=log))
    except CorrelationFailure as e:
        console.print(Panel.fit(f"[red]✗ FAIL[/red] {e}", border_style="red"))
        sys.exit(EXIT_ASSERTION_FAILURE)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        sys.exit(EXIT_TEST_ERROR)
    except Exception as e:
        console.print(
            Panel.fit(f"[red]✗ ERROR[/red] {type(e).__name__}: {e}", border_style="red")
        )
        sys.exit(EXIT_TEST_ERROR)

    _display_entry(entry)
    sys.exit(EXIT_PASS)


def _display_entry(entry: ConsoleLogEntry) -> None:
    table = Table(show_header=True, header_style="bold", title="Captured console entry")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name, value in entry.to_dict().items():
        table.add_row(name, "" if value is None else str(value))
    console.print(table)
    console.print("[green]✓ Console entry correlated to the main tab[/green]")
