"""pkgsync data models."""

from pkgsync.models.actions import Action, ActionKind
from pkgsync.models.config import PluginConfig
from pkgsync.models.manifest import (
    MANIFEST_FILENAME,
    Binding,
    Manifest,
    ManifestIOError,
    PackageRecord,
    load_manifest,
    load_or_create_manifest,
    save_manifest,
)
from pkgsync.models.packages import (
    AliasPackage,
    ConcretePackage,
    ResolvedPackage,
    resolve_alias,
)

__all__ = [
    "MANIFEST_FILENAME",
    "Action",
    "ActionKind",
    "AliasPackage",
    "Binding",
    "ConcretePackage",
    "Manifest",
    "ManifestIOError",
    "PackageRecord",
    "PluginConfig",
    "ResolvedPackage",
    "load_manifest",
    "load_or_create_manifest",
    "resolve_alias",
    "save_manifest",
]
