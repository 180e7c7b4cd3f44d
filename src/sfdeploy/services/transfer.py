"""Artifact transfer into the server and build byproduct cleanup."""

import os
import shutil
from typing import Optional

from sfdeploy.constants import ARCHIVE_SUFFIX, ARTIFACT_NAME, COMPILED_SUFFIX
from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.errors_catalog import actionable_error
from sfdeploy.models import CleanupReport


class TransferService:
    """Copies the built JAR into the extension folder and tidies the source tree."""

    def __init__(self, filesystem_service, logger, console):
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.console = console

    def ensure_extension_dir(self, config) -> str:
        target_dir = config.extension_dir
        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as exc:
            raise DeployError(
                actionable_error("extension_dir_failed", path=target_dir, reason=str(exc)),
                ErrorKind.TRANSFER,
            ) from exc
        return target_dir

    def stale_archives(self, directory: str):
        return self.filesystem_service.glob_files(directory, "*" + ARCHIVE_SUFFIX)

    def remove_stale_archives(self, directory: str) -> int:
        self.console.print("[blue]Removing old JAR files...[/blue]")
        removed, _ = self.filesystem_service.remove_files(self.stale_archives(directory))
        return removed

    def copy_artifact(self, source: str, destination: str):
        try:
            with open(source, "rb") as src, open(destination, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except OSError as exc:
            raise DeployError(
                actionable_error(
                    "copy_failed",
                    source=source,
                    destination=destination,
                    reason=str(exc),
                ),
                ErrorKind.TRANSFER,
            ) from exc

    def deploy_artifact(self, config, target_dir: Optional[str] = None) -> str:
        """Replace the JARs in the extension folder with the built artifact.

        Pass ``target_dir`` when the folder has already been ensured.
        """
        if target_dir is None:
            target_dir = self.ensure_extension_dir(config)
        self.remove_stale_archives(target_dir)

        destination = os.path.join(target_dir, ARTIFACT_NAME)
        self.console.print("[blue]Copying new JAR file...[/blue]")
        self.copy_artifact(config.artifact_path, destination)
        self.logger.info("Deployed %s to %s", config.artifact_path, destination)
        return destination

    def cleanup_build_outputs(self, config) -> CleanupReport:
        report = CleanupReport()

        self.console.print("[blue]Removing .class files from source directory...[/blue]")
        compiled = self.filesystem_service.find_files_with_suffix(config.sources_dir, COMPILED_SUFFIX)
        report.removed_classes, failed = self.filesystem_service.remove_files(compiled)
        report.failures += failed
        self.console.print(f"Removed {report.removed_classes} .class files")

        self.console.print("[blue]Removing JAR files from project root...[/blue]")
        archives = self.filesystem_service.glob_files(config.source_root, "*" + ARCHIVE_SUFFIX)
        report.removed_archives, failed = self.filesystem_service.remove_files(archives, verbose=True)
        report.failures += failed
        self.console.print(f"Removed {report.removed_archives} JAR files")

        if report.failures:
            self.logger.warning("%s files could not be removed during cleanup.", report.failures)
        return report
