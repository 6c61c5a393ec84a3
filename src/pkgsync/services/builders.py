"""Builders for the derived artifacts.

Each installed package may ship its own pkgsync.json declaring resource
mappings and discovery bindings. The builders merge those declarations
with the root manifest's and write:

- the resource repository index (repository path -> directory),
- the discovery index (binding type -> bound queries),
- the generated factory module that loads both indexes at runtime.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from pkgsync.models.manifest import (
    JSON_INDENT,
    MANIFEST_FILENAME,
    Manifest,
    ManifestIOError,
    load_manifest,
)
from pkgsync.utils.files import make_absolute, make_relative, write_file

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Exception raised when a derived artifact cannot be built."""


def _write_json(path: Path, data: object) -> None:
    try:
        write_file(path, json.dumps(data, indent=JSON_INDENT, ensure_ascii=False) + "\n")
    except OSError as e:
        raise BuildError(f"Could not write {path}: {e}") from e


class PackageSource(BaseModel):
    """Resource declarations of one package.

    Attributes:
        name: Package name (the root project's name for the root manifest).
        install_dir: Absolute directory of the package.
        manifest: The package's declarations.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    install_dir: Path
    manifest: Manifest


def collect_sources(manifest: Manifest, root_dir: Path) -> list[PackageSource]:
    """Gather resource declarations in override order.

    Installed packages come first in manifest order, the root project last
    so that its declarations win.

    Args:
        manifest: The root manifest.
        root_dir: The project root.

    Returns:
        One source per package that ships declarations, plus the root.

    Raises:
        BuildError: If a package's pkgsync.json is not a valid manifest.
    """
    sources: list[PackageSource] = []

    for name, record in manifest.packages.items():
        install_dir = make_absolute(record.install_path, root_dir)
        try:
            package_manifest = load_manifest(install_dir / MANIFEST_FILENAME)
        except ManifestIOError as e:
            raise BuildError(f"Invalid resource declarations in package {name}: {e}") from e

        if package_manifest is None:
            continue
        sources.append(PackageSource(name=name, install_dir=install_dir, manifest=package_manifest))

    sources.append(
        PackageSource(name=manifest.name or "__root__", install_dir=root_dir, manifest=manifest)
    )
    return sources


class RepositoryBuilder(BaseModel):
    """Builds the resource repository index.

    Attributes:
        root_dir: Project root.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path

    def build(self, manifest: Manifest) -> Path:
        """Write the repository index for the manifest.

        Args:
            manifest: The reconciled root manifest.

        Returns:
            Path of the written index.

        Raises:
            BuildError: If declarations are invalid or the index cannot be written.
        """
        mappings: dict[str, str] = {}
        owners: dict[str, str] = {}

        for source in collect_sources(manifest, self.root_dir):
            for repository_path, directory in source.manifest.resources.items():
                if not repository_path.startswith("/"):
                    raise BuildError(
                        f"Package {source.name} maps relative repository path {repository_path!r}"
                    )
                target = make_relative(source.install_dir / directory, self.root_dir)
                previous = owners.get(repository_path)
                if previous is not None and previous != source.name:
                    logger.warning(
                        f"{source.name} overrides {repository_path} previously mapped by {previous}"
                    )
                mappings[repository_path] = target
                owners[repository_path] = source.name

        index_file = make_absolute(manifest.config.repository_file, self.root_dir)
        _write_json(index_file, dict(sorted(mappings.items())))
        logger.info(f"Built resource repository with {len(mappings)} mapping(s): {index_file}")
        return index_file


class DiscoveryBuilder(BaseModel):
    """Builds the discovery index from declared bindings.

    Attributes:
        root_dir: Project root.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path

    def build(self, manifest: Manifest) -> Path:
        """Write the discovery index for the manifest.

        Args:
            manifest: The reconciled root manifest.

        Returns:
            Path of the written index.

        Raises:
            BuildError: If no discovery file is configured, declarations are
                invalid or the index cannot be written.
        """
        if not manifest.config.discovery_file:
            raise BuildError("No discovery file configured")

        index: dict[str, list[dict[str, str]]] = {}
        for source in collect_sources(manifest, self.root_dir):
            for binding in source.manifest.bindings:
                index.setdefault(binding.type, []).append(
                    {"query": binding.query, "package": source.name}
                )

        index_file = make_absolute(manifest.config.discovery_file, self.root_dir)
        _write_json(index_file, dict(sorted(index.items())))
        logger.info(f"Built discovery index with {len(index)} binding type(s): {index_file}")
        return index_file


FACTORY_TEMPLATE = '''"""Factory generated by pkgsync. Do not edit, changes are overwritten."""

import json
from pathlib import Path

ROOT_DIR = Path({root_dir!r})
REPOSITORY_FILE = ROOT_DIR / {repository_file!r}
DISCOVERY_FILE = {discovery_file}


class {class_name}:
    """Creates the resource repository and discovery for this project."""

    def create_repository(self) -> dict[str, Path]:
        mappings = json.loads(REPOSITORY_FILE.read_text(encoding="utf-8"))
        return {{path: ROOT_DIR / directory for path, directory in mappings.items()}}

    def create_discovery(self) -> dict[str, list[dict[str, str]]]:
        if DISCOVERY_FILE is None:
            return {{}}
        return json.loads(DISCOVERY_FILE.read_text(encoding="utf-8"))
'''


class FactoryGenerator(BaseModel):
    """Generates the factory module registered with the autoloader.

    Attributes:
        root_dir: Project root.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path

    def render(self, manifest: Manifest) -> str:
        """Render the factory module source."""
        config = manifest.config
        if config.discovery_file:
            discovery = f"ROOT_DIR / {config.discovery_file!r}"
        else:
            discovery = "None"

        return FACTORY_TEMPLATE.format(
            root_dir=make_absolute(self.root_dir, Path.cwd()).as_posix(),
            repository_file=config.repository_file,
            discovery_file=discovery,
            class_name=config.factory_short_name,
        )

    def generate(self, manifest: Manifest) -> Path:
        """Write the factory module.

        Args:
            manifest: The reconciled root manifest.

        Returns:
            Path of the generated module.

        Raises:
            BuildError: If the module cannot be written.
        """
        factory_file = make_absolute(manifest.config.factory_file, self.root_dir)
        try:
            write_file(factory_file, self.render(manifest))
        except OSError as e:
            raise BuildError(f"Could not write factory {factory_file}: {e}") from e
        logger.info(f"Generated {manifest.config.factory_class} in {factory_file}")
        return factory_file
