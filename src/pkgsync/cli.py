"""pkgsync CLI entry point.

Stands in for the host package manager's lifecycle: each command fires
the notifications the host would fire after the matching operation.
"""

import logging

import typer

from pkgsync import __version__
from pkgsync.commands import dump_autoload, install, update

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="pkgsync",
    help="pkgsync - keep the package manifest and derived artifacts in sync",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Handle the version flag callback.

    Raises:
        typer.Exit: Always raised after printing version when value is True.
    """
    if value:
        typer.echo(f"pkgsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """pkgsync - keep the package manifest and derived artifacts in sync."""


app.command(name="install", help="Reconcile after installing dependencies")(install)
app.command(name="update", help="Reconcile after updating dependencies")(update)
app.command(name="dump-autoload", help="Register the factory with the autoloader")(dump_autoload)


if __name__ == "__main__":
    app()
