"""CLI entry point for bidi-console."""

import click

from .._version import __version__
from .commands.doctor import doctor
from .commands.run import run


@click.group()
@click.version_option(__version__, prog_name="bidi-console")
def cli():
    """Console log correlation checks over WebDriver BiDi.

    \b
    Examples:
      bidi-console run              # Run the two-tab scenario headless
      bidi-console run --headed     # Watch it happen
      bidi-console doctor           # Check browser and configuration
    """


cli.add_command(run)
cli.add_command(doctor)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
