"""Source tree, target installation and extension name validation."""

import os

from sfdeploy.constants import (
    EXPECTED_LIBRARY_ARCHIVES,
    FORBIDDEN_EXTENSION_CHARS,
    LIBRARY_DIR_NAME,
    SERVER_DIR_NAME,
    SOURCE_DIR_NAME,
    SOURCE_SUFFIX,
)
from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.errors_catalog import actionable_error


class PathValidator:
    """Validates deployment inputs before they are used or persisted."""

    def __init__(self, host, filesystem_service, logger, console):
        self.host = host
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.console = console

    def validate_source_tree(self, path: str):
        if not path or not os.path.isdir(path):
            raise DeployError(actionable_error("source_not_found", path=path), ErrorKind.VALIDATION)

        sources_dir = os.path.join(path, SOURCE_DIR_NAME)
        if not os.path.isdir(sources_dir):
            raise DeployError(
                actionable_error("source_without_sources", path=sources_dir),
                ErrorKind.VALIDATION,
            )

        if not self.filesystem_service.has_file_with_suffix(sources_dir, SOURCE_SUFFIX):
            raise DeployError(
                actionable_error("source_without_sources", path=sources_dir),
                ErrorKind.VALIDATION,
            )

    def validate_target_tree(self, path: str):
        server_dir = os.path.join(path or "", SERVER_DIR_NAME)
        launcher = os.path.join(server_dir, self.host.launcher_name)
        if not path or not os.path.isdir(server_dir) or not os.path.isfile(launcher):
            raise DeployError(
                actionable_error("target_not_found", path=path, launcher=self.host.launcher_name),
                ErrorKind.VALIDATION,
            )

        # The classpath step falls back gracefully, so these only warn.
        library_dir = os.path.join(server_dir, LIBRARY_DIR_NAME)
        for archive_name in EXPECTED_LIBRARY_ARCHIVES:
            archive_path = os.path.join(library_dir, archive_name)
            if not os.path.isfile(archive_path):
                self.logger.warning("%s not found at %s", archive_name, archive_path)
                self.console.print(
                    f"[yellow]Warning:[/yellow] {archive_name} not found at {archive_path}"
                )

    def validate_extension_name(self, name: str):
        if (
            not name
            or name.strip() in ("", ".", "..")
            or any(char in name for char in FORBIDDEN_EXTENSION_CHARS)
        ):
            raise DeployError(actionable_error("invalid_extension_name", name=name), ErrorKind.VALIDATION)

    def is_valid_source_tree(self, path: str) -> bool:
        return self._passes(self.validate_source_tree, path)

    def is_valid_target_tree(self, path: str) -> bool:
        return self._passes(self.validate_target_tree, path)

    def is_valid_extension_name(self, name: str) -> bool:
        return self._passes(self.validate_extension_name, name)

    def _passes(self, check, value: str) -> bool:
        try:
            check(value)
        except DeployError as exc:
            self.logger.debug("Validation failed: %s", exc)
            return False
        return True
