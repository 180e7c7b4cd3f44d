"""Java compiler discovery and version checks."""

import glob
import os
import re
import shutil
from typing import Callable, Iterable, Mapping, Optional

from packaging import version

from sfdeploy.constants import REQUIRED_JAVA_VERSION
from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.errors_catalog import actionable_error

COMPILER = "javac"
_VERSION_TOKEN = re.compile(r"javac\s+([0-9][0-9A-Za-z._+-]*)")


class ToolchainLocator:
    """Finds a JDK whose compiler matches the required major version."""

    def __init__(
        self,
        host,
        command_runner,
        prompt_service,
        logger,
        console,
        required_version: str = REQUIRED_JAVA_VERSION,
        environ: Optional[Mapping[str, str]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        glob_func: Callable[[str], Iterable[str]] = glob.glob,
    ):
        self.host = host
        self.command_runner = command_runner
        self.prompt_service = prompt_service
        self.logger = logger
        self.console = console
        self.required_version = str(required_version)
        self.environ = os.environ if environ is None else environ
        self.which = which
        self.glob = glob_func

    def locate(self) -> str:
        """Returns the directory holding ``javac``, trying each strategy in order."""
        strategies = (
            self._from_java_home,
            self._from_search_path,
            self._from_well_known_locations,
            self._from_prompt,
        )
        for strategy in strategies:
            directory = strategy()
            if directory:
                self.logger.info("Using Java %s toolchain at %s", self.required_version, directory)
                return directory

        raise DeployError(
            actionable_error("toolchain_not_found", version=self.required_version),
            ErrorKind.TOOLCHAIN,
        )

    def _from_java_home(self) -> Optional[str]:
        java_home = self.environ.get("JAVA_HOME")
        if not java_home:
            return None

        compiler = self.host.executable(os.path.join(java_home, "bin"), COMPILER)
        return self._accept(compiler, "JAVA_HOME")

    def _from_search_path(self) -> Optional[str]:
        compiler = self.which(COMPILER)
        if not compiler:
            return None
        return self._accept(compiler, "PATH")

    def _from_well_known_locations(self) -> Optional[str]:
        for pattern in self.host.toolchain_patterns:
            for compiler in sorted(self.glob(pattern)):
                directory = self._accept(compiler, pattern)
                if directory:
                    return directory
        return None

    def _from_prompt(self) -> Optional[str]:
        self.console.print(f"[red]Java {self.required_version} not found automatically[/red]")
        user_path = self.prompt_service.ask_text(
            f"Please enter the path to Java {self.required_version} bin directory "
            "(or press Enter to skip)",
            default="",
        ).strip()
        if not user_path:
            return None

        if os.path.isfile(self.host.executable(user_path, COMPILER)):
            return user_path

        self.logger.warning("No %s found in %s", COMPILER, user_path)
        return None

    def _accept(self, compiler: str, origin: str) -> Optional[str]:
        if not os.path.isfile(compiler):
            self.logger.debug("Compiler candidate from %s does not exist: %s", origin, compiler)
            return None

        if not self.is_compatible(compiler):
            self.logger.debug("Compiler candidate from %s has the wrong version: %s", origin, compiler)
            return None

        return os.path.dirname(compiler)

    def is_compatible(self, compiler: str) -> bool:
        try:
            result = self.command_runner.run(
                [compiler, "-version"],
                check=False,
                combine_output=True,
            )
        except DeployError as exc:
            self.logger.debug("Could not run %s: %s", compiler, exc)
            return False

        if result.returncode != 0:
            return False

        major = self.parse_major_version(result.stdout or "")
        return major is not None and str(major) == self.required_version

    @staticmethod
    def parse_major_version(output: str) -> Optional[int]:
        """Extract the major version from ``javac -version`` output.

        Legacy ``1.x`` tokens map to major ``x``.
        """
        match = _VERSION_TOKEN.search(output)
        if not match:
            return None

        token = match.group(1).replace("_", "+")
        try:
            parsed = version.parse(token)
        except version.InvalidVersion:
            leading = re.match(r"\d+", token)
            return int(leading.group(0)) if leading else None

        if parsed.major == 1 and len(parsed.release) > 1:
            return parsed.release[1]
        return parsed.major
