"""pkgsync services."""

from pkgsync.services.builders import (
    BuildError,
    DiscoveryBuilder,
    FactoryGenerator,
    RepositoryBuilder,
)
from pkgsync.services.factory_registration import (
    AutoloadFileNotFoundError,
    ClassMapFileInvalidError,
    ClassMapFileNotFoundError,
    FactoryFileNotFoundError,
    FactoryRegistrar,
    FactoryRegistrationError,
)
from pkgsync.services.host import FileSystemHost, Host, HostError
from pkgsync.services.plugin import NotificationKind, PackageSyncPlugin
from pkgsync.services.rebuild import OneShotGuard, RebuildTrigger
from pkgsync.services.reconciler import INSTALLER_NAME, Reconciler, diff_manifest
from pkgsync.services.snapshot import SnapshotEntry, build_snapshot

__all__ = [
    "INSTALLER_NAME",
    "AutoloadFileNotFoundError",
    "BuildError",
    "ClassMapFileInvalidError",
    "ClassMapFileNotFoundError",
    "DiscoveryBuilder",
    "FactoryFileNotFoundError",
    "FactoryGenerator",
    "FactoryRegistrar",
    "FactoryRegistrationError",
    "FileSystemHost",
    "Host",
    "HostError",
    "NotificationKind",
    "OneShotGuard",
    "PackageSyncPlugin",
    "RebuildTrigger",
    "Reconciler",
    "SnapshotEntry",
    "build_snapshot",
    "diff_manifest",
]
