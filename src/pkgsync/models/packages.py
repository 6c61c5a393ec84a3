"""Pydantic models for packages reported by the dependency resolver.

The resolver reports either concrete packages or aliases that wrap a
concrete package under an alternate version. Both are modelled as a
tagged union discriminated by the "kind" field.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

METAPACKAGE_TYPE = "metapackage"


class ConcretePackage(BaseModel):
    """A package that is actually installed.

    Attributes:
        kind: Discriminator, always "package".
        name: Package name (e.g., "vendor/package1").
        version: Installed version.
        type: Package type; metapackages have nothing to install.
        install_path: Optional install path reported by the resolver.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["package"] = "package"
    name: str
    version: str = ""
    type: str = "library"
    install_path: str | None = Field(default=None, alias="install-path")


class AliasPackage(BaseModel):
    """A resolver alias for a concrete package.

    Attributes:
        kind: Discriminator, always "alias".
        version: The aliased version.
        alias_of: The concrete package behind the alias.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["alias"] = "alias"
    version: str = ""
    alias_of: ConcretePackage = Field(..., alias="alias-of")

    @property
    def name(self) -> str:
        """Return the name of the underlying package."""
        return self.alias_of.name


ResolvedPackage = Annotated[ConcretePackage | AliasPackage, Field(discriminator="kind")]


def resolve_alias(package: ConcretePackage | AliasPackage) -> ConcretePackage:
    """Return the concrete package behind a resolver entry.

    Args:
        package: A concrete package or an alias.

    Returns:
        The package itself if concrete, otherwise the aliased package.
    """
    if isinstance(package, AliasPackage):
        return package.alias_of
    return package
