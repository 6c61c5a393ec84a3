"""pkgsync CLI commands."""

from pkgsync.commands.dump_autoload import dump_autoload
from pkgsync.commands.install import install, update

__all__ = ["install", "update", "dump_autoload"]
