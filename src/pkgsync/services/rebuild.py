"""One-shot rebuild of the derived artifacts.

The host package manager may fire the same lifecycle notification more
than once per command. The rebuild is expensive, so it runs at most once
per process, guarded by a OneShotGuard owned by the plugin session.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from pkgsync.models.actions import Action
from pkgsync.models.manifest import Manifest
from pkgsync.services.builders import DiscoveryBuilder, FactoryGenerator, RepositoryBuilder
from pkgsync.utils.console import console, print_banner, print_package_line
from pkgsync.utils.files import make_relative

logger = logging.getLogger(__name__)

REPOSITORY_BANNER = "Building resource repository"
DISCOVERY_BANNER = "Building resource discovery"


class OneShotGuard(BaseModel):
    """Process-lifetime flag marking a step as done.

    Attributes:
        name: Step name, used in log messages.
        done: Whether the step has completed in this process.
    """

    name: str
    done: bool = False

    def set(self) -> None:
        """Mark the step as done."""
        self.done = True
        logger.debug(f"{self.name} completed, further runs are skipped")


class RebuildTrigger(BaseModel):
    """Reports reconciliation actions and rebuilds the derived artifacts.

    Attributes:
        root_dir: Project root, used to shorten paths in progress lines.
        output: Console progress lines are written to.
        repository_builder: Builds the resource repository index.
        discovery_builder: Builds the discovery index.
        factory_generator: Regenerates the factory module.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path
    output: Console = Field(default_factory=lambda: console)
    repository_builder: RepositoryBuilder | None = None
    discovery_builder: DiscoveryBuilder | None = None
    factory_generator: FactoryGenerator | None = None

    def model_post_init(self, __context: object) -> None:
        if self.repository_builder is None:
            self.repository_builder = RepositoryBuilder(root_dir=self.root_dir)
        if self.discovery_builder is None:
            self.discovery_builder = DiscoveryBuilder(root_dir=self.root_dir)
        if self.factory_generator is None:
            self.factory_generator = FactoryGenerator(root_dir=self.root_dir)

    def report(self, actions: Sequence[Action]) -> None:
        """Print one progress line per mutating action."""
        for action in actions:
            if not action.mutating:
                continue
            print_package_line(
                self.output,
                action.verb,
                action.name,
                make_relative(action.path, self.root_dir),
            )

    def maybe_rebuild(
        self, manifest: Manifest, actions: Sequence[Action], guard: OneShotGuard
    ) -> bool:
        """Report the actions and rebuild, unless already done in this process.

        The first call rebuilds even if there are no actions. Build failures
        propagate and leave the guard unset; the manifest has already been
        persisted at that point and is not rolled back.

        Args:
            manifest: The reconciled manifest.
            actions: Actions returned by the reconciler.
            guard: The install/update rebuild guard.

        Returns:
            True if the rebuild ran.

        Raises:
            BuildError: If an artifact cannot be built.
        """
        if guard.done:
            logger.debug("Rebuild already ran in this process, skipping")
            return False

        self.report(actions)

        print_banner(self.output, REPOSITORY_BANNER)
        self.repository_builder.build(manifest)
        self.factory_generator.generate(manifest)

        if manifest.config.has_discovery:
            print_banner(self.output, DISCOVERY_BANNER)
            self.discovery_builder.build(manifest)

        guard.set()
        return True
