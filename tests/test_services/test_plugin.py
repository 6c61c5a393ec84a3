"""Integration tests for the plugin session.

Each test drives the plugin through host notifications against a real
project tree (see the ``project`` fixture) and checks the progress lines,
the manifest on disk and the generated artifacts.
"""

import json
import shutil
from pathlib import Path

import pytest

from pkgsync.models import ManifestIOError
from pkgsync.services import (
    INSTALLER_NAME,
    ClassMapFileNotFoundError,
    FileSystemHost,
    NotificationKind,
    PackageSyncPlugin,
)
from pkgsync.services.factory_registration import FACTORY_CONSTANT
from tests.conftest import CapturedOutput, alias_entry, package_entry, write_installed

LOOKING = "Looking for updated packages"
BUILD_REPOSITORY = "Building resource repository"
BUILD_DISCOVERY = "Building resource discovery"


def _record(path: str, installer: str = INSTALLER_NAME) -> dict:
    return {"installPath": path, "installer": installer}


def _write_manifest(manifest_file: Path, packages: dict) -> None:
    manifest_file.write_text(
        json.dumps({"name": "vendor/root", "packages": packages}, indent=4) + "\n"
    )


@pytest.fixture
def plugin(host: FileSystemHost, output: CapturedOutput) -> PackageSyncPlugin:
    return PackageSyncPlugin(host=host, output=output.console)


ALL_INSTALLED = {
    "vendor/package1": _record("vendor/vendor/package1"),
    "vendor/package2": _record("vendor/vendor/package2"),
}


class TestSubscribedEvents:
    """Tests for the notification mapping."""

    def test_all_notifications_handled(self, plugin: PackageSyncPlugin) -> None:
        events = plugin.subscribed_events()

        assert set(events) == set(NotificationKind)
        assert events[NotificationKind.POST_INSTALL] == plugin.on_post_install_or_update
        assert events[NotificationKind.POST_UPDATE] == plugin.on_post_install_or_update
        assert events[NotificationKind.POST_AUTOLOAD_DUMP] == plugin.on_post_autoload_dump


class TestPostInstallOrUpdate:
    """Tests for the install/update handler."""

    @pytest.mark.parametrize("kind", [NotificationKind.POST_INSTALL, NotificationKind.POST_UPDATE])
    def test_install_new_packages(
        self,
        kind: NotificationKind,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        manifest_file: Path,
        project: Path,
    ) -> None:
        """Test installing into a project without a manifest."""
        plugin.dispatch(kind)

        assert output.lines == [
            LOOKING,
            "Installing vendor/package1 (vendor/vendor/package1)",
            "Installing vendor/package2 (vendor/vendor/package2)",
            BUILD_REPOSITORY,
            BUILD_DISCOVERY,
        ]
        data = json.loads(manifest_file.read_text())
        assert data == {"name": "vendor/root", "packages": ALL_INSTALLED}
        assert (project / ".pkgsync" / "repository.json").exists()
        assert (project / ".pkgsync" / "discovery.json").exists()
        assert (project / ".pkgsync" / "pkgsync_generated.py").exists()

    @pytest.mark.parametrize("kind", [NotificationKind.POST_INSTALL, NotificationKind.POST_UPDATE])
    def test_only_processed_on_first_call(
        self,
        kind: NotificationKind,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
    ) -> None:
        """Test that a repeated notification has no side effects."""
        plugin.dispatch(kind)
        lines = list(output.lines)
        shutil.rmtree(project / ".pkgsync")

        plugin.dispatch(kind)
        plugin.dispatch(NotificationKind.POST_UPDATE)

        assert output.lines == lines
        assert not (project / ".pkgsync").exists()

    def test_do_not_reinstall_existing_packages(
        self, plugin: PackageSyncPlugin, output: CapturedOutput, manifest_file: Path
    ) -> None:
        """Test that only the missing package is installed."""
        _write_manifest(manifest_file, {"vendor/package1": _record("vendor/vendor/package1")})

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [
            LOOKING,
            "Installing vendor/package2 (vendor/vendor/package2)",
            BUILD_REPOSITORY,
            BUILD_DISCOVERY,
        ]

    def test_unchanged_manifest_is_not_rewritten(
        self, plugin: PackageSyncPlugin, output: CapturedOutput, manifest_file: Path
    ) -> None:
        """Test that an up-to-date manifest keeps its exact bytes."""
        manifest_file.write_text(json.dumps({"packages": ALL_INSTALLED, "name": "vendor/root"}))
        before = manifest_file.read_bytes()

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert manifest_file.read_bytes() == before
        assert output.lines == [LOOKING, BUILD_REPOSITORY, BUILD_DISCOVERY]

    def test_do_not_install_packages_without_install_path(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that metapackages are never installed."""
        write_installed(project / "vendor", [package_entry("vendor/package1", type="metapackage")])

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [LOOKING, BUILD_REPOSITORY, BUILD_DISCOVERY]
        assert "packages" not in json.loads(manifest_file.read_text())

    def test_resolve_alias_packages(
        self, plugin: PackageSyncPlugin, output: CapturedOutput, project: Path
    ) -> None:
        """Test that a package only reported through an alias is installed."""
        write_installed(project / "vendor", [alias_entry("vendor/package1")])

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines[1] == "Installing vendor/package1 (vendor/vendor/package1)"
        assert len(output.lines) == 4

    def test_install_aliased_package_only_once(
        self, plugin: PackageSyncPlugin, output: CapturedOutput, project: Path
    ) -> None:
        """Test that a package reported directly and via alias is installed once."""
        write_installed(
            project / "vendor",
            [package_entry("vendor/package1"), alias_entry("vendor/package1")],
        )

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [
            LOOKING,
            "Installing vendor/package1 (vendor/vendor/package1)",
            BUILD_REPOSITORY,
            BUILD_DISCOVERY,
        ]

    def test_remove_removed_packages(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that packages no longer resolved are removed."""
        _write_manifest(
            manifest_file, {**ALL_INSTALLED, "vendor/package3": _record("vendor/vendor/package3")}
        )
        write_installed(
            project / "vendor",
            [package_entry("vendor/package1"), package_entry("vendor/package2")],
        )

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [
            LOOKING,
            "Removing vendor/package3 (vendor/vendor/package3)",
            BUILD_REPOSITORY,
            BUILD_DISCOVERY,
        ]
        assert json.loads(manifest_file.read_text())["packages"] == ALL_INSTALLED

    def test_do_not_remove_packages_from_other_installer(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that foreign entries survive although they are not resolved."""
        _write_manifest(manifest_file, {"vendor/package3": _record("elsewhere", "other-tool")})
        before = manifest_file.read_bytes()
        write_installed(project / "vendor", [])

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [LOOKING, BUILD_REPOSITORY, BUILD_DISCOVERY]
        assert manifest_file.read_bytes() == before

    def test_reinstall_package_moved_to_sub_path(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that a package whose path moved is reinstalled."""
        _write_manifest(manifest_file, ALL_INSTALLED)
        write_installed(
            project / "vendor",
            [
                package_entry("vendor/package1", **{"install-path": "vendor/package1/sub/path"}),
                package_entry("vendor/package2"),
            ],
        )

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [
            LOOKING,
            "Reinstalling vendor/package1 (vendor/vendor/package1/sub/path)",
            BUILD_REPOSITORY,
            BUILD_DISCOVERY,
        ]
        packages = json.loads(manifest_file.read_text())["packages"]
        assert packages["vendor/package1"] == _record("vendor/vendor/package1/sub/path")

    def test_reinstall_package_moved_to_parent_path(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        manifest_file: Path,
    ) -> None:
        """Test moving back to the parent path restores the original manifest."""
        _write_manifest(
            manifest_file,
            {**ALL_INSTALLED, "vendor/package1": _record("vendor/vendor/package1/sub/path")},
        )

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines[1] == "Reinstalling vendor/package1 (vendor/vendor/package1)"
        assert json.loads(manifest_file.read_text())["packages"] == ALL_INSTALLED

    def test_copy_project_name_to_new_manifest(
        self, plugin: PackageSyncPlugin, project: Path, manifest_file: Path
    ) -> None:
        """Test that a created manifest carries the host project's name."""
        write_installed(project / "vendor", [])

        plugin.dispatch(NotificationKind.POST_INSTALL)

        assert json.loads(manifest_file.read_text()) == {"name": "vendor/root"}

    def test_corrupt_manifest_aborts(
        self, plugin: PackageSyncPlugin, output: CapturedOutput, manifest_file: Path
    ) -> None:
        """Test that an unreadable manifest is fatal and nothing is rebuilt."""
        manifest_file.write_text("{")

        with pytest.raises(ManifestIOError):
            plugin.dispatch(NotificationKind.POST_INSTALL)

        assert output.lines == [LOOKING]
        assert not plugin.install_guard.done


class TestPostAutoloadDump:
    """Tests for the autoload-dump handler."""

    def test_insert_factory_into_class_map_and_autoload(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
    ) -> None:
        """Test registering the factory after an install."""
        plugin.dispatch(NotificationKind.POST_INSTALL)
        output.buffer.truncate(0)
        output.buffer.seek(0)

        plugin.dispatch(NotificationKind.POST_AUTOLOAD_DUMP)

        assert output.lines == [
            "Generating factory-class constant",
            "Registering pkgsync_generated.GeneratedFactory with the class-map autoloader",
        ]
        class_map = json.loads((project / "vendor" / "autoload_classmap.json").read_text())
        assert class_map["pkgsync_generated.GeneratedFactory"] == ".pkgsync/pkgsync_generated.py"
        namespace: dict = {}
        exec((project / "vendor" / "autoload.py").read_text(), namespace)
        assert namespace[FACTORY_CONSTANT] == "pkgsync_generated.GeneratedFactory"

    def test_fail_if_class_map_file_not_found(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that a missing class map fails and leaves install state alone."""
        plugin.dispatch(NotificationKind.POST_INSTALL)
        manifest_before = manifest_file.read_bytes()
        (project / "vendor" / "autoload_classmap.json").unlink()

        with pytest.raises(ClassMapFileNotFoundError, match="autoload_classmap.json"):
            plugin.dispatch(NotificationKind.POST_AUTOLOAD_DUMP)

        assert not plugin.factory_guard.done
        assert plugin.install_guard.done
        assert manifest_file.read_bytes() == manifest_before

    def test_run_post_autoload_dump_only_once(
        self, plugin: PackageSyncPlugin, output: CapturedOutput
    ) -> None:
        """Test that a second autoload notification writes nothing."""
        plugin.dispatch(NotificationKind.POST_INSTALL)
        install_lines = len(output.lines)

        plugin.dispatch(NotificationKind.POST_AUTOLOAD_DUMP)
        plugin.dispatch(NotificationKind.POST_AUTOLOAD_DUMP)

        assert len(output.lines) == install_lines + 2

    def test_uses_factory_from_manifest_config(
        self,
        plugin: PackageSyncPlugin,
        output: CapturedOutput,
        project: Path,
        manifest_file: Path,
    ) -> None:
        """Test that the configured factory class is registered."""
        manifest_file.write_text(
            json.dumps({"config": {"factory-class": "My.Factory", "factory-file": "My/Factory.py"}})
        )
        (project / "My").mkdir()
        (project / "My" / "Factory.py").write_text("class Factory:\n    pass\n")

        plugin.dispatch(NotificationKind.POST_AUTOLOAD_DUMP)

        class_map = json.loads((project / "vendor" / "autoload_classmap.json").read_text())
        assert class_map["My.Factory"] == "My/Factory.py"
