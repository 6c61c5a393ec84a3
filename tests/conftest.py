"""Shared pytest fixtures for pkgsync tests."""

import io
import json
import re
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from pkgsync.services import FileSystemHost


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class CapturedOutput:
    """A Rich Console writing plain text into a buffer."""

    def __init__(self) -> None:
        self.buffer = io.StringIO()
        self.console = Console(file=self.buffer, width=200, color_system=None, force_terminal=False)

    @property
    def lines(self) -> list[str]:
        """Return the printed lines without markup."""
        return [line for line in strip_ansi(self.buffer.getvalue()).splitlines() if line]


def write_installed(vendor_dir: Path, packages: list[dict]) -> None:
    """Write the resolver report read by FileSystemHost.

    Args:
        vendor_dir: The vendor directory.
        packages: Package entries as they appear in installed.json.
    """
    vendor_dir.mkdir(parents=True, exist_ok=True)
    (vendor_dir / "installed.json").write_text(json.dumps(packages, indent=2))


def package_entry(name: str, **extra: object) -> dict:
    """Build a concrete package entry for installed.json."""
    return {"kind": "package", "name": name, "version": "1.0", **extra}


def alias_entry(name: str, **extra: object) -> dict:
    """Build an alias entry wrapping a concrete package."""
    return {"kind": "alias", "version": "1.0", "alias-of": package_entry(name, **extra)}


@pytest.fixture
def runner() -> CliRunner:
    """Create a CliRunner for testing commands."""
    return CliRunner()


@pytest.fixture
def output() -> CapturedOutput:
    """Provide a console whose output can be inspected."""
    return CapturedOutput()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project with two installed packages and autoloader artifacts.

    Layout:
        pyproject.toml              name = "vendor/root"
        vendor/installed.json       vendor/package1, vendor/package2
        vendor/vendor/package1/     (empty package dirs)
        vendor/autoload.py
        vendor/autoload_classmap.json

    Returns:
        Path to the project root.
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "pyproject.toml").write_text('[project]\nname = "vendor/root"\n')

    vendor = root / "vendor"
    write_installed(vendor, [package_entry("vendor/package1"), package_entry("vendor/package2")])
    (vendor / "vendor" / "package1").mkdir(parents=True)
    (vendor / "vendor" / "package2").mkdir(parents=True)

    (vendor / "autoload.py").write_text(
        '"""Autoloader generated by the package manager."""\n\nimport sys\n'
    )
    (vendor / "autoload_classmap.json").write_text(
        json.dumps({"vendor.package1.Thing": "vendor/vendor/package1/thing.py"}, indent=4) + "\n"
    )
    return root


@pytest.fixture
def host(project: Path) -> FileSystemHost:
    """Create a FileSystemHost for the project fixture."""
    return FileSystemHost.for_project(project)


@pytest.fixture
def manifest_file(project: Path) -> Path:
    """Return the manifest path of the project fixture."""
    return project / "pkgsync.json"
