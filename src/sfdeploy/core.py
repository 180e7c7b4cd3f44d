"""Phase runner for a single hot deploy."""

import logging
import os
from typing import Callable, Dict, Optional

from rich.console import Console

from .constants import (
    CONFIG_FILE,
    LOCK_RELEASE_TIMEOUT_SECONDS,
    REQUIRED_JAVA_VERSION,
    SCRIPT_CLEANUP_DELAY_SECONDS,
    SERVER_PORT,
)
from .errors import DeployError, ErrorKind
from .host import HostPlatform, detect_host
from .models import Phase, PhaseResult, RunContext
from .services.builder import BuildService
from .services.command_runner import CommandRunner
from .services.config_store import ConfigStore
from .services.filesystem import FileSystemService
from .services.process_inspector import create_process_inspector
from .services.process_manager import ProcessManager
from .services.prompt import PromptService
from .services.setup import SetupService
from .services.toolchain import ToolchainLocator
from .services.transfer import TransferService
from .services.validation import PathValidator

console = Console()
logger = logging.getLogger("sfdeploy")


class DeploymentPipeline:
    """Setup -> Build -> Deploy -> Restart -> Cleanup, aborting on the first failure."""

    PHASES = (Phase.SETUP, Phase.BUILD, Phase.DEPLOY, Phase.RESTART, Phase.CLEANUP)
    PHASE_TITLES = {
        Phase.SETUP: "Phase 1: Directory Setup",
        Phase.BUILD: "Phase 2: Building Project",
        Phase.DEPLOY: "Phase 3: Deploying Project",
        Phase.RESTART: "Phase 4: Restarting SmartFox Server",
        Phase.CLEANUP: "Phase 5: Cleaning Up Project",
    }

    def __init__(
        self,
        config_file: str = CONFIG_FILE,
        server_port: int = SERVER_PORT,
        java_version: str = REQUIRED_JAVA_VERSION,
        lock_release_timeout: float = LOCK_RELEASE_TIMEOUT_SECONDS,
        script_cleanup_delay: float = SCRIPT_CLEANUP_DELAY_SECONDS,
        manage_process: bool = True,
        pause_on_exit: bool = True,
        host: Optional[HostPlatform] = None,
        prompt_service: Optional[PromptService] = None,
    ):
        self.config_file = os.path.abspath(config_file)
        self.server_port = server_port
        self.pause_on_exit = pause_on_exit

        self.host = host or detect_host()
        self.prompt_service = prompt_service or PromptService()
        self.command_runner = CommandRunner(logger=logger)
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.validator = PathValidator(
            host=self.host,
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
        )
        self.toolchain_locator = ToolchainLocator(
            host=self.host,
            command_runner=self.command_runner,
            prompt_service=self.prompt_service,
            logger=logger,
            console=console,
            required_version=java_version,
        )
        self.setup_service = SetupService(
            host=self.host,
            config_store=ConfigStore(config_file=self.config_file, logger=logger),
            validator=self.validator,
            toolchain_locator=self.toolchain_locator,
            prompt_service=self.prompt_service,
            logger=logger,
            console=console,
        )
        self.build_service = BuildService(
            host=self.host,
            command_runner=self.command_runner,
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
        )
        self.transfer_service = TransferService(
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
        )
        self.process_manager = ProcessManager(
            host=self.host,
            inspector=create_process_inspector(self.host, self.command_runner, logger),
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
            port=server_port,
            manage_process=manage_process,
            lock_release_timeout=lock_release_timeout,
            script_cleanup_delay=script_cleanup_delay,
        )

    def _handlers(self) -> Dict[Phase, Callable[[RunContext], None]]:
        return {
            Phase.SETUP: self.setup,
            Phase.BUILD: self.build,
            Phase.DEPLOY: self.deploy,
            Phase.RESTART: self.restart,
            Phase.CLEANUP: self.cleanup,
        }

    def setup(self, context: RunContext):
        context.config = self.setup_service.run()

    def build(self, context: RunContext):
        self.build_service.build(context.config)

    def deploy(self, context: RunContext):
        config = context.config
        target_dir = self.transfer_service.ensure_extension_dir(config)
        console.print(f"[blue]Deploying to: {target_dir}[/blue]")

        # Discovery must happen before the server is killed.
        context.discovered = self.process_manager.discover_server_window()

        console.print(f"[blue]Stopping processes on port {self.server_port}...[/blue]")
        terminated = self.process_manager.terminate_listeners()

        console.print("[blue]Waiting for file locks to release...[/blue]")
        self.process_manager.wait_for_release(terminated, self.transfer_service.stale_archives(target_dir))

        self.transfer_service.deploy_artifact(config, target_dir)
        console.print("[green]Deployment successful.[/green]")

    def restart(self, context: RunContext):
        self.process_manager.relaunch(context.config, context.discovered)
        console.print("[dim]Check the new terminal window for server logs and status.[/dim]")

    def cleanup(self, context: RunContext):
        report = self.transfer_service.cleanup_build_outputs(context.config)
        if report.failures:
            console.print(f"[yellow]{report.failures} files could not be removed.[/yellow]")
        console.print("[green]Project cleanup completed.[/green]")

    def _run_phase(self, context: RunContext, phase: Phase, handler) -> PhaseResult:
        context.phase = phase
        console.print(f"[bold blue]{self.PHASE_TITLES[phase]}[/bold blue]")
        logger.debug("Entering phase: %s", phase.value)

        try:
            handler(context)
        except DeployError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error("Phase %s failed: %s", phase.value, exc)
            return PhaseResult(phase=phase, success=False, error_kind=exc.kind, detail=str(exc))
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error in phase %s", phase.value)
            return PhaseResult(phase=phase, success=False, error_kind=ErrorKind.INTERNAL, detail=str(exc))

        console.print()
        return PhaseResult(phase=phase, success=True)

    def run(self, context: Optional[RunContext] = None) -> int:
        context = context or RunContext()
        console.rule("[bold]SmartFox Hot Deploy[/bold]")

        try:
            handlers = self._handlers()
            for phase in self.PHASES:
                result = self._run_phase(context, phase, handlers[phase])
                context.results.append(result)
                if not result.success:
                    context.phase = Phase.ABORTED
                    return 1
        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            context.phase = Phase.ABORTED
            return 1

        context.phase = Phase.DONE
        console.print("[bold green]Hot deploy completed successfully![/bold green]")
        if self.pause_on_exit:
            self.prompt_service.pause()
        return 0
