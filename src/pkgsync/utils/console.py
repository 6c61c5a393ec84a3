"""Rich console utilities for pkgsync output.

This module provides the shared Rich Console used by the CLI and the
formatting helpers for the progress lines reported during reconciliation.
"""

import logging
import sys

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

# Legacy Windows encodings that cannot render the status symbols
LEGACY_WINDOWS_ENCODINGS = frozenset({"cp1252", "cp437", "ascii"})


def create_console() -> Console:
    """Create a Rich Console suited to the current terminal.

    Returns:
        Console: A Console in legacy_windows mode on Windows terminals with a
        legacy encoding, a default Console otherwise.
    """
    if sys.platform == "win32":
        encoding = getattr(sys.stdout, "encoding", None) or "utf-8"
        encoding = encoding.lower().replace("-", "")

        if encoding in LEGACY_WINDOWS_ENCODINGS:
            logger.debug("Legacy Windows encoding '%s', enabling legacy_windows mode", encoding)
            return Console(legacy_windows=True)

    return Console()


console = create_console()


def print_success(message: str) -> None:
    """Print a success message with a green checkmark.

    Args:
        message: The success message to display.
    """
    console.print(f"[bold green]✓[/bold green] {message}")


def print_error(message: str) -> None:
    """Print an error message with a red X.

    Args:
        message: The error message to display.
    """
    console.print(f"[bold red]✗[/bold red] {message}")


def print_banner(output: Console, message: str) -> None:
    """Print a section banner such as "Looking for updated packages".

    Args:
        output: Console the line is written to.
        message: Banner text.
    """
    output.print(f"[green]{escape(message)}[/green]", highlight=False)


def print_package_line(output: Console, verb: str, name: str, short_path: str) -> None:
    """Print one package progress line.

    Renders as "Installing vendor/package1 (package1)".

    Args:
        output: Console the line is written to.
        verb: Action verb ("Installing", "Reinstalling", "Removing").
        name: Package name.
        short_path: Install path shortened for display.
    """
    output.print(
        f"{verb} [green]{escape(name)}[/green] ([yellow]{escape(short_path)}[/yellow])",
        highlight=False,
    )
