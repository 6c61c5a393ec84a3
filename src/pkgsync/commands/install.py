"""pkgsync install and update commands.

Both mirror what the host package manager does after installing or
updating dependencies: notify pkgsync of the finished install, then of
the regenerated autoloader.
"""

from pathlib import Path

from pkgsync.commands._session import ROOT_OPTION, VENDOR_OPTION, run_notifications
from pkgsync.services import NotificationKind


def install(
    root: Path | None = ROOT_OPTION,
    vendor_dir: str = VENDOR_OPTION,
) -> None:
    """Reconcile installed packages and rebuild derived artifacts."""
    run_notifications(
        root,
        vendor_dir,
        [NotificationKind.POST_INSTALL, NotificationKind.POST_AUTOLOAD_DUMP],
    )


def update(
    root: Path | None = ROOT_OPTION,
    vendor_dir: str = VENDOR_OPTION,
) -> None:
    """Reconcile updated packages and rebuild derived artifacts."""
    run_notifications(
        root,
        vendor_dir,
        [NotificationKind.POST_UPDATE, NotificationKind.POST_AUTOLOAD_DUMP],
    )
