"""Setup phase: reuse or collect the deployment configuration."""

import dataclasses
import os
from typing import Optional

from sfdeploy.models import DeployConfig


class SetupService:
    """Produces a validated DeployConfig with a resolved toolchain."""

    def __init__(
        self,
        host,
        config_store,
        validator,
        toolchain_locator,
        prompt_service,
        logger,
        console,
        home: Optional[str] = None,
    ):
        self.host = host
        self.config_store = config_store
        self.validator = validator
        self.toolchain_locator = toolchain_locator
        self.prompt_service = prompt_service
        self.logger = logger
        self.console = console
        self.home = home if home is not None else os.path.expanduser("~")

    def run(self) -> DeployConfig:
        previous = self.config_store.load()
        if previous is not None:
            reused = self._reuse_previous(previous)
            if reused is not None:
                return reused

        config = self.collect()
        config = dataclasses.replace(config, toolchain_path=self.toolchain_locator.locate())
        self.console.print(f"[green]Java toolchain: {config.toolchain_path}[/green]")

        self.config_store.save(config)
        self.console.print("[green]Configuration saved for next time.[/green]")
        return config

    def _reuse_previous(self, previous: DeployConfig) -> Optional[DeployConfig]:
        self.console.print("[bold]Found previous configuration:[/bold]")
        self.console.print(f"   Source: {previous.source_root}")
        self.console.print(f"   Target: {previous.target_root}")
        self.console.print(f"   Extension: {previous.extension_name}")

        if not self.prompt_service.ask_yes_no("Do you want to use the previous configuration?"):
            return None

        if not (
            self.validator.is_valid_source_tree(previous.source_root)
            and self.validator.is_valid_target_tree(previous.target_root)
            and self.validator.is_valid_extension_name(previous.extension_name)
        ):
            self.console.print("[yellow]Previous paths are no longer valid, please enter new ones.[/yellow]")
            self.logger.warning("Saved configuration failed validation; collecting a new one.")
            return None

        config = dataclasses.replace(previous, toolchain_path=self.toolchain_locator.locate())
        self.console.print("[green]Using previous configuration.[/green]")
        self.console.print(f"[green]Java toolchain: {config.toolchain_path}[/green]")
        return config

    def collect(self) -> DeployConfig:
        source_root = self._ask_source_root()
        target_root = self._choose_target_root()
        extension_name = self._ask_extension_name()
        return DeployConfig(
            source_root=source_root,
            target_root=target_root,
            extension_name=extension_name,
        )

    def find_target_installation(self) -> Optional[str]:
        for candidate in self.host.candidate_target_dirs(self.home):
            if self.validator.is_valid_target_tree(candidate):
                return candidate
        return None

    def _ask_source_root(self) -> str:
        while True:
            source_root = self.prompt_service.ask_text("Enter source directory (SmartFox project)")
            if self.validator.is_valid_source_tree(source_root):
                self.console.print(f"[green]Valid source directory: {source_root}[/green]")
                return source_root

            self.console.print(f"[red]Invalid source directory: {source_root}[/red]")
            self.console.print("   Please ensure the directory contains a 'src' folder with .java files")

    def _choose_target_root(self) -> str:
        detected = self.find_target_installation()
        if detected:
            self.console.print(f"[blue]Auto-detected SmartFox server: {detected}[/blue]")
            if self.prompt_service.ask_yes_no("Do you want to use this SmartFox server installation?"):
                return detected

        while True:
            target_root = self.prompt_service.ask_text("Enter target directory (SmartFox server)")
            if self.validator.is_valid_target_tree(target_root):
                self.console.print(f"[green]Valid target directory: {target_root}[/green]")
                return target_root

            self.console.print(f"[red]Invalid target directory: {target_root}[/red]")
            self.console.print(
                f"   Please ensure the directory contains 'SFS2X/{self.host.launcher_name}'"
            )

    def _ask_extension_name(self) -> str:
        while True:
            name = self.prompt_service.ask_text("Enter extension folder name (e.g., SFServer, MyExtension)")
            if self.validator.is_valid_extension_name(name):
                self.console.print(f"[green]Valid extension folder: {name}[/green]")
                return name

            self.console.print("[red]Invalid extension folder name[/red]")
            self.console.print("   Please enter a simple folder name (no paths, colons, or slashes)")
