"""Java compilation and JAR packaging."""

import os
from typing import List

from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from sfdeploy.constants import ARCHIVE_SUFFIX, COMPILED_SUFFIX, SOURCE_SUFFIX
from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.errors_catalog import actionable_error


class BuildService:
    """Compiles extension sources against the server libraries and packages a JAR."""

    def __init__(self, host, command_runner, filesystem_service, logger, console):
        self.host = host
        self.command_runner = command_runner
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.console = console

    def clean_compiled_output(self, sources_dir: str) -> int:
        compiled = self.filesystem_service.find_files_with_suffix(sources_dir, COMPILED_SUFFIX)
        removed, _ = self.filesystem_service.remove_files(compiled)
        return removed

    def find_sources(self, sources_dir: str) -> List[str]:
        return self.filesystem_service.find_files_with_suffix(sources_dir, SOURCE_SUFFIX)

    def build_classpath(self, library_dir: str) -> str:
        entries = self.filesystem_service.glob_files(library_dir, "*" + ARCHIVE_SUFFIX)

        if not entries:
            self.logger.warning("No JAR files found in %s", library_dir)
            self.console.print(f"[yellow]Warning:[/yellow] No JAR files found in {library_dir}")
            return "."

        return self.host.classpath_separator.join(entries)

    def compile(self, config, sources: List[str], classpath: str):
        javac = self.host.executable(config.toolchain_path, "javac")
        cmd = [javac, "-cp", classpath, "-d", config.sources_dir] + sources
        result = self._run_tool(cmd, config.sources_dir, "Compiling Java files...")
        if result.returncode != 0:
            raise DeployError(
                actionable_error("compile_failed", output=(result.stdout or "").strip()),
                ErrorKind.BUILD,
            )

    def package(self, config) -> str:
        jar = self.host.executable(config.toolchain_path, "jar")
        artifact = config.artifact_path
        result = self._run_tool(
            [jar, "cf", artifact, "."],
            config.sources_dir,
            "Creating JAR file...",
        )
        if result.returncode != 0:
            raise DeployError(
                actionable_error("package_failed", output=(result.stdout or "").strip()),
                ErrorKind.BUILD,
            )
        return artifact

    def build(self, config) -> str:
        self.console.print("[blue]Cleaning old class files...[/blue]")
        removed = self.clean_compiled_output(config.sources_dir)
        self.logger.debug("Removed %s stale class files", removed)

        sources = self.find_sources(config.sources_dir)
        if not sources:
            raise DeployError(
                actionable_error("no_sources", path=config.sources_dir),
                ErrorKind.BUILD,
            )
        self.console.print(f"[blue]Found {len(sources)} Java files[/blue]")

        classpath = self.build_classpath(config.library_dir)
        self.logger.debug("Using classpath: %s", classpath)

        self.compile(config, sources, classpath)
        self.console.print("[green]Compilation successful.[/green]")

        artifact = self.package(config)
        self.console.print("[green]JAR file created successfully.[/green]")
        self.logger.info("Built %s", artifact)
        return artifact

    def _run_tool(self, cmd: List[str], cwd: str, description: str):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            progress.add_task(f"[bold magenta]{description}", total=None)
            return self.command_runner.run(cmd, check=False, cwd=cwd, combine_output=True)
