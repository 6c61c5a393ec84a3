"""Pydantic model for the manifest's configuration section.

The "config" object inside pkgsync.json controls where generated
artifacts are written and which factory class is registered with the
autoloader. Every key is optional; missing keys fall back to defaults.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FACTORY_CLASS = "pkgsync_generated.GeneratedFactory"
DEFAULT_FACTORY_FILE = ".pkgsync/pkgsync_generated.py"
DEFAULT_REPOSITORY_FILE = ".pkgsync/repository.json"
DEFAULT_DISCOVERY_FILE = ".pkgsync/discovery.json"


class PluginConfig(BaseModel):
    """Configuration for artifact generation.

    Paths are relative to the project root unless absolute.

    Attributes:
        factory_class: Fully-qualified name of the generated factory class.
        factory_file: File the generated factory module is written to.
        repository_file: File the resource repository index is written to.
        discovery_file: File the discovery index is written to, or None
            when the project has no discovery configuration.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    factory_class: str = Field(
        default=DEFAULT_FACTORY_CLASS,
        alias="factory-class",
        description="Fully-qualified name of the generated factory class",
    )
    factory_file: str = Field(
        default=DEFAULT_FACTORY_FILE,
        alias="factory-file",
        description="Path of the generated factory module",
    )
    repository_file: str = Field(
        default=DEFAULT_REPOSITORY_FILE,
        alias="repository-file",
        description="Path of the resource repository index",
    )
    discovery_file: str | None = Field(
        default=DEFAULT_DISCOVERY_FILE,
        alias="discovery-file",
        description="Path of the discovery index (null disables discovery)",
    )

    @property
    def factory_short_name(self) -> str:
        """Return the unqualified class name of the factory."""
        return self.factory_class.rsplit(".", 1)[-1]

    @property
    def has_discovery(self) -> bool:
        """Return True if a discovery index should be built."""
        return bool(self.discovery_file)
