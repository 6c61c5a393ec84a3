"""pkgsync dump-autoload command."""

from pathlib import Path

from pkgsync.commands._session import ROOT_OPTION, VENDOR_OPTION, run_notifications
from pkgsync.services import NotificationKind


def dump_autoload(
    root: Path | None = ROOT_OPTION,
    vendor_dir: str = VENDOR_OPTION,
) -> None:
    """Register the generated factory with the host autoloader."""
    run_notifications(root, vendor_dir, [NotificationKind.POST_AUTOLOAD_DUMP])
