"""Snapshot of the currently resolved packages.

The snapshot is the current truth reconciliation diffs the manifest
against: one (name, install path) pair per installed package, in the
order the resolver reported them.
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import NamedTuple

from pkgsync.models.packages import AliasPackage, ConcretePackage, resolve_alias
from pkgsync.utils.files import make_relative

logger = logging.getLogger(__name__)


class SnapshotEntry(NamedTuple):
    """A resolved package and its canonical install path."""

    name: str
    path: str


def build_snapshot(
    packages: Iterable[ConcretePackage | AliasPackage],
    install_path_of: Callable[[ConcretePackage], str],
    root_dir: Path | None = None,
) -> list[SnapshotEntry]:
    """Build the snapshot from the resolver's package report.

    Aliases are replaced by the package they wrap, so a package listed both
    directly and through an alias appears once. Packages without an install
    path (metapackages) are skipped.

    Args:
        packages: The resolver's package report.
        install_path_of: Returns a package's install path, "" if none.
        root_dir: If given, paths are stored relative to it when inside it.

    Returns:
        Snapshot entries in first-seen order.
    """
    snapshot: list[SnapshotEntry] = []
    seen: set[str] = set()

    for reported in packages:
        package = resolve_alias(reported)

        if package.name in seen:
            continue

        install_path = install_path_of(package)
        if not install_path:
            logger.debug(f"Skipping {package.name}: no install path")
            continue

        seen.add(package.name)
        if root_dir is not None:
            install_path = make_relative(install_path, root_dir)
        snapshot.append(SnapshotEntry(package.name, install_path))

    return snapshot
