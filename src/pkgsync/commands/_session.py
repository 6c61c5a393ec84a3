"""Shared plumbing for commands that fire lifecycle notifications."""

import logging
from pathlib import Path

import typer

from pkgsync.models import ManifestIOError
from pkgsync.services import (
    BuildError,
    FactoryRegistrationError,
    FileSystemHost,
    HostError,
    NotificationKind,
    PackageSyncPlugin,
)
from pkgsync.utils import console, print_error, print_success

logger = logging.getLogger(__name__)

ROOT_OPTION = typer.Option(
    None,
    "--root",
    "-r",
    help="Project root directory (default: current directory).",
)
VENDOR_OPTION = typer.Option(
    "vendor",
    "--vendor-dir",
    help="Directory packages are installed into, relative to the root.",
)


def run_notifications(
    root: Path | None, vendor_dir: str, kinds: list[NotificationKind]
) -> None:
    """Create a plugin session and fire notifications in order.

    Args:
        root: Project root, or None for the current directory.
        vendor_dir: Vendor directory relative to the root.
        kinds: Notifications to fire.

    Raises:
        typer.Exit: With code 1 if any handler fails.
    """
    root_dir = (root or Path.cwd()).resolve()
    host = FileSystemHost.for_project(root_dir, vendor_dir)
    plugin = PackageSyncPlugin(host=host, output=console)

    for kind in kinds:
        try:
            plugin.dispatch(kind)
        except (
            ManifestIOError,
            HostError,
            BuildError,
            FactoryRegistrationError,
        ) as e:
            print_error(str(e))
            raise typer.Exit(1)

    print_success("Done")
