"""pkgsync plugin session.

One PackageSyncPlugin is created per process run. It owns the one-shot
guards and maps the host's lifecycle notifications to their handlers:

- POST_INSTALL / POST_UPDATE: snapshot -> reconcile -> rebuild (once).
- POST_AUTOLOAD_DUMP: register the generated factory (once).
"""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from rich.console import Console

from pkgsync.models.actions import Action
from pkgsync.models.manifest import (
    MANIFEST_FILENAME,
    Manifest,
    load_manifest,
    load_or_create_manifest,
)
from pkgsync.services.factory_registration import FactoryRegistrar
from pkgsync.services.host import Host
from pkgsync.services.rebuild import OneShotGuard, RebuildTrigger
from pkgsync.services.reconciler import Reconciler
from pkgsync.services.snapshot import build_snapshot
from pkgsync.utils.console import console, print_banner

logger = logging.getLogger(__name__)

LOOKING_BANNER = "Looking for updated packages"


class NotificationKind(Enum):
    """Lifecycle notifications fired by the host package manager."""

    POST_INSTALL = "post-install"
    POST_UPDATE = "post-update"
    POST_AUTOLOAD_DUMP = "post-autoload-dump"


class PackageSyncPlugin(BaseModel):
    """Session object handling the host's lifecycle notifications.

    Attributes:
        host: The host package manager adapter.
        output: Console progress lines are written to.
        manifest_filename: Manifest file name inside the project root.
        install_guard: Set once the install/update rebuild ran.
        factory_guard: Set once the factory was registered.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: Host
    output: Console = Field(default_factory=lambda: console)
    manifest_filename: str = MANIFEST_FILENAME
    install_guard: OneShotGuard = Field(
        default_factory=lambda: OneShotGuard(name="install/update rebuild")
    )
    factory_guard: OneShotGuard = Field(
        default_factory=lambda: OneShotGuard(name="factory registration")
    )

    _handlers: dict[NotificationKind, Callable[[], None]] = PrivateAttr(default_factory=dict)
    _rebuild_trigger: RebuildTrigger = PrivateAttr()
    _registrar: FactoryRegistrar = PrivateAttr()

    def model_post_init(self, __context: object) -> None:
        self._handlers = {
            NotificationKind.POST_INSTALL: self.on_post_install_or_update,
            NotificationKind.POST_UPDATE: self.on_post_install_or_update,
            NotificationKind.POST_AUTOLOAD_DUMP: self.on_post_autoload_dump,
        }
        self._rebuild_trigger = RebuildTrigger(root_dir=self.host.root_dir, output=self.output)
        self._registrar = FactoryRegistrar(
            root_dir=self.host.root_dir,
            autoload_file=self.host.autoload_file,
            class_map_file=self.host.class_map_file,
            output=self.output,
        )

    @property
    def manifest_path(self) -> Path:
        return self.host.root_dir / self.manifest_filename

    def subscribed_events(self) -> dict[NotificationKind, Callable[[], None]]:
        """Return the notification to handler mapping."""
        return dict(self._handlers)

    def dispatch(self, kind: NotificationKind) -> None:
        """Run the handler registered for a notification.

        Args:
            kind: The notification fired by the host.
        """
        logger.debug(f"Received {kind.value} notification")
        self._handlers[kind]()

    def reconcile(self) -> tuple[Manifest, list[Action]]:
        """Reconcile the manifest with the host's resolved packages.

        Returns:
            The updated manifest and the computed actions.

        Raises:
            ManifestIOError: If the manifest cannot be read or written.
        """
        manifest = load_or_create_manifest(self.manifest_path, self.host.project_name())
        snapshot = build_snapshot(
            self.host.resolve_packages(),
            self.host.install_path_of,
            self.host.root_dir,
        )
        reconciler = Reconciler(manifest_path=self.manifest_path)
        return reconciler.reconcile(manifest, snapshot)

    def on_post_install_or_update(self) -> None:
        """Handle a post-install or post-update notification.

        Only the first notification in a process does any work.

        Raises:
            ManifestIOError: If the manifest cannot be read or written.
            BuildError: If a derived artifact cannot be built.
        """
        if self.install_guard.done:
            logger.debug("Install/update already processed in this run")
            return

        print_banner(self.output, LOOKING_BANNER)
        manifest, actions = self.reconcile()
        self._rebuild_trigger.maybe_rebuild(manifest, actions, self.install_guard)

    def on_post_autoload_dump(self) -> None:
        """Handle a post-autoload-dump notification.

        Raises:
            ManifestIOError: If an existing manifest cannot be read.
            FactoryRegistrationError: If a required artifact is missing or invalid.
        """
        if self.factory_guard.done:
            logger.debug("Factory registration already processed in this run")
            return

        manifest = load_manifest(self.manifest_path) or Manifest()
        self._registrar.register(manifest.config, self.factory_guard)
