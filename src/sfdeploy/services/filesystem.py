"""Filesystem helpers for sfdeploy."""

import glob
import logging
import os
import sys
from typing import Iterator, List, Tuple

from rich.console import Console


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except Exception as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def iter_files_with_suffix(self, root: str, suffix: str) -> Iterator[str]:
        """Yield files below ``root`` whose name ends with ``suffix`` (case-insensitive)."""
        suffix = suffix.lower()
        for current_root, _dirs, files in os.walk(root):
            for file_name in files:
                if file_name.lower().endswith(suffix):
                    yield os.path.join(current_root, file_name)

    def has_file_with_suffix(self, root: str, suffix: str) -> bool:
        return next(self.iter_files_with_suffix(root, suffix), None) is not None

    def find_files_with_suffix(self, root: str, suffix: str) -> List[str]:
        return list(self.iter_files_with_suffix(root, suffix))

    def glob_files(self, directory: str, pattern: str) -> List[str]:
        return sorted(path for path in glob.glob(os.path.join(directory, pattern)) if os.path.isfile(path))

    def remove_files(self, paths: List[str], verbose: bool = False) -> Tuple[int, int]:
        """Remove ``paths``, tolerating failures. Returns (removed, failed)."""
        removed = 0
        failed = 0
        for path in paths:
            try:
                os.remove(path)
            except OSError as exc:
                failed += 1
                message = f"Warning: Could not remove {os.path.basename(path)}: {exc}"
                self.console.print(f"[yellow]{message}[/yellow]")
                self.logger.warning(message)
                continue

            removed += 1
            self.logger.debug("Removed file: %s", path)
            if verbose:
                self.console.print(f"   Removed: {os.path.basename(path)}")

        return removed, failed
