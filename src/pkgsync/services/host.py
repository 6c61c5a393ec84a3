"""Host package manager adapter.

pkgsync never resolves dependencies itself. Everything it knows about the
current dependency tree comes from the host through the Host protocol:
the resolved package list, where each package is installed, the project's
declared name and the locations of the generated autoloader artifacts.

FileSystemHost implements the protocol on top of files the host package
manager leaves behind in the project.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from pkgsync.models.packages import (
    METAPACKAGE_TYPE,
    AliasPackage,
    ConcretePackage,
    ResolvedPackage,
)

logger = logging.getLogger(__name__)

INSTALLED_FILENAME = "installed.json"
AUTOLOAD_FILENAME = "autoload.py"
CLASS_MAP_FILENAME = "autoload_classmap.json"

_resolved_list = TypeAdapter(list[ResolvedPackage])


class HostError(Exception):
    """Raised when the host's package report cannot be read."""


@runtime_checkable
class Host(Protocol):
    """What pkgsync needs from the host package manager."""

    @property
    def root_dir(self) -> Path: ...

    @property
    def autoload_file(self) -> Path: ...

    @property
    def class_map_file(self) -> Path: ...

    def project_name(self) -> str | None: ...

    def resolve_packages(self) -> list[ConcretePackage | AliasPackage]: ...

    def install_path_of(self, package: ConcretePackage) -> str: ...


class FileSystemHost(BaseModel):
    """Host adapter reading the package manager's on-disk state.

    Expects the resolver report at <vendor>/installed.json, a JSON list of
    package entries:

        [
            {"kind": "package", "name": "vendor/a", "version": "1.0"},
            {"kind": "alias", "version": "2.x-dev",
             "alias-of": {"name": "vendor/b", "version": "dev-main"}}
        ]

    Attributes:
        root_dir: Project root directory.
        vendor_dir: Directory packages are installed into.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path
    vendor_dir: Path

    @classmethod
    def for_project(cls, root_dir: Path, vendor_dir: str = "vendor") -> "FileSystemHost":
        """Create a host for a project root and a root-relative vendor dir."""
        return cls(root_dir=root_dir, vendor_dir=root_dir / vendor_dir)

    @property
    def autoload_file(self) -> Path:
        return self.vendor_dir / AUTOLOAD_FILENAME

    @property
    def class_map_file(self) -> Path:
        return self.vendor_dir / CLASS_MAP_FILENAME

    def project_name(self) -> str | None:
        """Read the project's declared name from pyproject.toml.

        Returns:
            The [project].name value, or None if it is not declared.
        """
        pyproject = self.root_dir / "pyproject.toml"
        if not pyproject.exists():
            return None

        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            raise HostError(f"Could not read project name from {pyproject}: {e}") from e

        name = data.get("project", {}).get("name")
        return str(name) if name else None

    def resolve_packages(self) -> list[ConcretePackage | AliasPackage]:
        """Return the resolver's package report.

        Returns:
            Reported packages in report order; empty if nothing is installed.

        Raises:
            HostError: If the report exists but cannot be parsed.
        """
        installed = self.vendor_dir / INSTALLED_FILENAME
        if not installed.exists():
            logger.debug(f"No package report at {installed}")
            return []

        try:
            data = json.loads(installed.read_text(encoding="utf-8"))
            return _resolved_list.validate_python(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise HostError(f"Invalid package report {installed}: {e}") from e

    def install_path_of(self, package: ConcretePackage) -> str:
        """Return where a package is installed.

        Metapackages have nothing to install and yield an empty string.
        An explicit install-path in the report is taken relative to the
        vendor directory; otherwise <vendor>/<name> is assumed.

        Args:
            package: A concrete package.

        Returns:
            Absolute install path, or "" for metapackages.
        """
        if package.type == METAPACKAGE_TYPE:
            return ""
        if package.install_path is not None:
            if not package.install_path:
                return ""
            return str(self.vendor_dir / package.install_path)
        return str(self.vendor_dir / package.name)
