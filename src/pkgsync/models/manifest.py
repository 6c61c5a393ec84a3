"""Pydantic models for the pkgsync.json package manifest.

The manifest records every package pkgsync has installed, together with
the path it was installed to and the installer that owns the entry. The
same document format is used by packages to declare their resources and
discovery bindings.

Example:
    {
        "name": "vendor/root",
        "packages": {
            "vendor/package1": {"installPath": "vendor/package1", "installer": "pkgsync"}
        }
    }
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pkgsync.models.config import PluginConfig

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "pkgsync.json"

JSON_INDENT = 4


class ManifestIOError(Exception):
    """Raised when a manifest cannot be read, parsed or written.

    Attributes:
        path: The manifest file that failed.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        """Initialize ManifestIOError.

        Args:
            path: The manifest file that failed.
            reason: Human-readable description of the failure.
        """
        self.path = path
        super().__init__(f"Could not process manifest {path}: {reason}")


class PackageRecord(BaseModel):
    """One installed package as last recorded in the manifest.

    Attributes:
        install_path: Canonical install path (root-relative when possible).
        installer: Name of the tool that installed the package.
    """

    model_config = ConfigDict(populate_by_name=True)

    install_path: str = Field(..., alias="installPath")
    installer: str = Field(..., alias="installer")


class Binding(BaseModel):
    """A discovery binding declared by a package.

    Attributes:
        query: Repository query the binding applies to (e.g. "/app/trans/*.xlf").
        type: Binding type name the resources are bound to.
    """

    query: str
    type: str


class Manifest(BaseModel):
    """The pkgsync.json document.

    Attributes:
        name: Identity of the project owning the manifest.
        config: Artifact generation settings.
        resources: Repository path to directory mappings.
        bindings: Discovery bindings.
        packages: Installed packages keyed by package name.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    config: PluginConfig = Field(default_factory=PluginConfig)
    resources: dict[str, str] = Field(default_factory=dict)
    bindings: list[Binding] = Field(default_factory=list)
    packages: dict[str, PackageRecord] = Field(default_factory=dict)

    def to_json_data(self) -> dict[str, Any]:
        """Build the JSON structure written to disk.

        Empty sections are omitted and packages are sorted by name so that
        saving unchanged content always yields the same bytes.

        Returns:
            Dictionary ready for json.dumps.
        """
        data: dict[str, Any] = {}
        if self.name is not None:
            data["name"] = self.name

        config = self.config.model_dump(by_alias=True, exclude_defaults=True)
        if config:
            data["config"] = config
        if self.resources:
            data["resources"] = dict(sorted(self.resources.items()))
        if self.bindings:
            data["bindings"] = [binding.model_dump() for binding in self.bindings]

        for key, value in (self.model_extra or {}).items():
            data[key] = value

        if self.packages:
            data["packages"] = {
                name: record.model_dump(by_alias=True)
                for name, record in sorted(self.packages.items())
            }
        return data


def load_manifest(path: Path) -> Manifest | None:
    """Load a manifest file from disk.

    Args:
        path: Path to the pkgsync.json file.

    Returns:
        Manifest model if the file exists, None otherwise.

    Raises:
        ManifestIOError: If the file cannot be read or is not a valid manifest.
    """
    if not path.exists():
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestIOError(path, str(e)) from e

    try:
        return Manifest.model_validate_json(content)
    except ValidationError as e:
        raise ManifestIOError(path, f"invalid manifest structure ({e.error_count()} error(s))") from e


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Save a Manifest model to a JSON file.

    Args:
        manifest: Manifest model to save.
        path: Path to write the file to.

    Raises:
        ManifestIOError: If the file cannot be written.
    """
    content = json.dumps(manifest.to_json_data(), indent=JSON_INDENT, ensure_ascii=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestIOError(path, str(e)) from e
    logger.info(f"Wrote manifest {path}")


def load_or_create_manifest(path: Path, project_name: str | None) -> Manifest:
    """Load the manifest, creating and persisting it if absent.

    A freshly created manifest carries the host project's name and is
    written to disk immediately, even when no packages get reconciled.

    Args:
        path: Path to the pkgsync.json file.
        project_name: Name declared by the host project.

    Returns:
        The loaded or newly created manifest.

    Raises:
        ManifestIOError: If the file cannot be read, parsed or created.
    """
    manifest = load_manifest(path)
    if manifest is not None:
        return manifest

    logger.info(f"No manifest at {path}, creating one for {project_name!r}")
    manifest = Manifest(name=project_name)
    save_manifest(manifest, path)
    return manifest
