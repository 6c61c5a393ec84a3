"""Reconciliation of the manifest against the package snapshot.

The reconciler works out which packages have to be installed, reinstalled
or removed so that the manifest matches what the resolver currently
reports, applies those changes to the manifest and persists it.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from pkgsync.models.actions import Action, ActionKind
from pkgsync.models.manifest import Manifest, PackageRecord, save_manifest
from pkgsync.services.snapshot import SnapshotEntry

logger = logging.getLogger(__name__)

# Installer identity recorded for every package pkgsync adds
INSTALLER_NAME = "pkgsync"


def diff_manifest(
    manifest: Manifest,
    snapshot: Sequence[SnapshotEntry],
    installer: str = INSTALLER_NAME,
) -> list[Action]:
    """Classify every package in the snapshot and the manifest.

    A package whose recorded path differs from its current path is
    reinstalled even if the old path still exists: the path string, not
    the filesystem, decides. Manifest entries missing from the snapshot are
    removed only if they were installed by ``installer``.

    Args:
        manifest: The manifest as last persisted.
        snapshot: The current package snapshot.
        installer: Installer identity owning removable entries.

    Returns:
        Actions for snapshot entries in snapshot order, followed by removals
        in manifest order.
    """
    actions: list[Action] = []
    current: set[str] = set()

    for name, path in snapshot:
        current.add(name)
        record = manifest.packages.get(name)

        if record is None:
            actions.append(Action.install(name, path))
        elif record.install_path != path:
            actions.append(Action.reinstall(name, record.install_path, path))
        else:
            actions.append(Action.unchanged(name, path))

    for name, record in manifest.packages.items():
        if name in current:
            continue
        if record.installer != installer:
            logger.debug(f"Keeping {name}: owned by installer {record.installer!r}")
            continue
        actions.append(Action.remove(name, record.install_path))

    return actions


def apply_actions(
    manifest: Manifest,
    actions: Sequence[Action],
    installer: str = INSTALLER_NAME,
) -> bool:
    """Apply actions to the manifest in place.

    Args:
        manifest: Manifest to mutate.
        actions: Actions returned by diff_manifest.
        installer: Installer identity recorded for installed packages.

    Returns:
        True if the manifest was modified.
    """
    changed = False

    for action in actions:
        if not action.mutating:
            continue

        if action.kind is ActionKind.REMOVE:
            manifest.packages.pop(action.name, None)
        elif action.kind is ActionKind.REINSTALL:
            # Reinstalls keep the recorded owner
            manifest.packages[action.name].install_path = action.path
        else:
            manifest.packages[action.name] = PackageRecord(
                install_path=action.path,
                installer=installer,
            )
        changed = True

    return changed


class Reconciler(BaseModel):
    """Diffs the snapshot against the manifest and persists the result.

    Attributes:
        manifest_path: Where the manifest is persisted.
        installer: This tool's installer identity.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    manifest_path: Path
    installer: str = INSTALLER_NAME

    def reconcile(
        self, manifest: Manifest, snapshot: Sequence[SnapshotEntry]
    ) -> tuple[Manifest, list[Action]]:
        """Bring the manifest in line with the snapshot.

        The manifest is written only if at least one package was
        installed, reinstalled or removed.

        Args:
            manifest: The loaded manifest; mutated in place.
            snapshot: The current package snapshot.

        Returns:
            The updated manifest and every action computed, including
            UNCHANGED ones.

        Raises:
            ManifestIOError: If the manifest cannot be written.
        """
        actions = diff_manifest(manifest, snapshot, self.installer)

        if apply_actions(manifest, actions, self.installer):
            save_manifest(manifest, self.manifest_path)
        else:
            logger.debug("Manifest is up to date, not writing")

        return manifest, actions
