"""pkgsync - package manifest reconciliation and artifact rebuilds."""

__version__ = "0.1.0"
