"""Models for the outcome of reconciling one package."""

from enum import Enum

from pydantic import BaseModel


class ActionKind(Enum):
    """What reconciliation did with a package.

    Attributes:
        INSTALL: Package was added to the manifest.
        REINSTALL: Package moved to a different install path.
        REMOVE: Package is no longer resolved and was dropped.
        UNCHANGED: Package is recorded with its current path.
    """

    INSTALL = "install"
    REINSTALL = "reinstall"
    REMOVE = "remove"
    UNCHANGED = "unchanged"


_VERBS = {
    ActionKind.INSTALL: "Installing",
    ActionKind.REINSTALL: "Reinstalling",
    ActionKind.REMOVE: "Removing",
}


class Action(BaseModel):
    """A single reconciliation action.

    Actions only live for the duration of one reconciliation.

    Attributes:
        kind: The action kind.
        name: Package name.
        path: Current install path (the removed path for REMOVE).
        old_path: Previously recorded path, set for REINSTALL only.
    """

    kind: ActionKind
    name: str
    path: str
    old_path: str | None = None

    @classmethod
    def install(cls, name: str, path: str) -> "Action":
        """Create an action adding a package to the manifest."""
        return cls(kind=ActionKind.INSTALL, name=name, path=path)

    @classmethod
    def reinstall(cls, name: str, old_path: str, new_path: str) -> "Action":
        """Create an action moving a package to a new install path."""
        return cls(kind=ActionKind.REINSTALL, name=name, path=new_path, old_path=old_path)

    @classmethod
    def remove(cls, name: str, path: str) -> "Action":
        """Create an action dropping a package from the manifest."""
        return cls(kind=ActionKind.REMOVE, name=name, path=path)

    @classmethod
    def unchanged(cls, name: str, path: str) -> "Action":
        """Create an action for a package recorded with its current path."""
        return cls(kind=ActionKind.UNCHANGED, name=name, path=path)

    @property
    def mutating(self) -> bool:
        """Return True if the action changes the manifest."""
        return self.kind is not ActionKind.UNCHANGED

    @property
    def verb(self) -> str:
        """Return the progress verb, or an empty string for UNCHANGED."""
        return _VERBS.get(self.kind, "")
