"""Server process lifecycle: discover, terminate, wait for release, relaunch."""

import os
import shlex
import shutil
import subprocess
import threading
import time
from typing import Callable, List, Optional

from sfdeploy.constants import (
    LOCK_RELEASE_POLL_SECONDS,
    LOCK_RELEASE_TIMEOUT_SECONDS,
    SCRIPT_CLEANUP_DELAY_SECONDS,
    SCRIPT_MODE,
    SERVER_PORT,
    WINDOW_TITLE,
    WRAPPER_SCRIPT_STEM,
)
from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.errors_catalog import actionable_error
from sfdeploy.models import DiscoveredProcess

LINUX_TERMINALS = (
    ("x-terminal-emulator", ["-e"]),
    ("gnome-terminal", ["--"]),
    ("konsole", ["-e"]),
    ("xterm", ["-e"]),
)


class ProcessManager:
    """Stops the running server and starts it again in a fresh terminal window.

    Discovery and termination are best effort and never raise. Only failing
    to write the wrapper script or to spawn the terminal aborts a restart.
    """

    def __init__(
        self,
        host,
        inspector,
        filesystem_service,
        logger,
        console,
        port: int = SERVER_PORT,
        manage_process: bool = True,
        lock_release_timeout: float = LOCK_RELEASE_TIMEOUT_SECONDS,
        poll_interval: float = LOCK_RELEASE_POLL_SECONDS,
        script_cleanup_delay: float = SCRIPT_CLEANUP_DELAY_SECONDS,
        popen: Callable = subprocess.Popen,
        which: Callable[[str], Optional[str]] = shutil.which,
        timer_factory: Callable = threading.Timer,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.host = host
        self.inspector = inspector
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.console = console
        self.port = port
        self.manage_process = manage_process
        self.lock_release_timeout = lock_release_timeout
        self.poll_interval = poll_interval
        self.script_cleanup_delay = script_cleanup_delay
        self.popen = popen
        self.which = which
        self.timer_factory = timer_factory
        self.sleep = sleep
        self.clock = clock

    @property
    def process_control_enabled(self) -> bool:
        return self.host.supports_process_control and self.manage_process

    def _skip_reason(self) -> str:
        if not self.host.supports_process_control:
            return f"process control is not supported on {self.host.name}"
        return "process management is disabled in settings"

    def discover_server_window(self) -> Optional[DiscoveredProcess]:
        if not self.process_control_enabled:
            self.logger.warning("Skipping server window discovery: %s.", self._skip_reason())
            return None

        self.console.print("[blue]Searching for the running server window...[/blue]")
        try:
            pids = self.inspector.list_listening_processes_on_port(self.port)
            for pid in pids:
                parent = self.inspector.find_parent_process(pid)
                self.logger.debug("Server PID %s has parent %s", pid, parent)
                if parent and parent.name.lower() in self.host.shell_names:
                    self.console.print(
                        f"[green]Found server window PID {parent.pid} (parent of {pid}).[/green]"
                    )
                    return DiscoveredProcess(pid=pid, window_pid=parent.pid)
        except DeployError as exc:
            self.logger.warning("Server window discovery failed: %s", exc)
            return None

        self.console.print("[yellow]Could not find server window - will create a new one.[/yellow]")
        if pids:
            return DiscoveredProcess(pid=pids[0])
        return None

    def terminate_listeners(self) -> List[int]:
        if not self.process_control_enabled:
            self.logger.warning("Skipping server termination: %s.", self._skip_reason())
            return []

        try:
            pids = self.inspector.list_listening_processes_on_port(self.port)
        except DeployError as exc:
            self.logger.warning("Could not list processes on port %s: %s", self.port, exc)
            return []

        terminated = []
        for pid in pids:
            self.console.print(f"[blue]Killing process {pid} using port {self.port}[/blue]")
            try:
                killed = self.inspector.terminate_process(pid)
            except DeployError as exc:
                self.logger.warning("Could not terminate process %s: %s", pid, exc)
                continue

            if killed:
                terminated.append(pid)
            else:
                self.logger.warning("Could not terminate process %s", pid)

        return terminated

    def wait_for_release(self, pids: List[int], lock_paths: List[str]) -> bool:
        """Poll until killed processes are gone and ``lock_paths`` can be opened.

        Bounded by ``lock_release_timeout``. Timing out only warns: the OS
        gives no guarantee when locks go away.
        """
        deadline = self.clock() + self.lock_release_timeout
        while True:
            pending = self._pending_release(pids, lock_paths)
            if not pending:
                return True
            if self.clock() >= deadline:
                self.logger.warning(
                    "Still waiting on %s after %.1fs; continuing anyway.",
                    ", ".join(pending),
                    self.lock_release_timeout,
                )
                return False
            self.sleep(self.poll_interval)

    def _pending_release(self, pids: List[int], lock_paths: List[str]) -> List[str]:
        pending = []
        for pid in pids:
            try:
                if self.inspector.is_process_alive(pid):
                    pending.append(f"process {pid}")
            except DeployError as exc:
                self.logger.debug("Could not check process %s: %s", pid, exc)

        for path in lock_paths:
            if not os.path.exists(path):
                continue
            try:
                with open(path, "ab"):
                    pass
            except OSError:
                pending.append(os.path.basename(path))
        return pending

    def close_window(self, discovered: Optional[DiscoveredProcess]):
        if not discovered or discovered.window_pid is None or not self.process_control_enabled:
            return

        try:
            if self.inspector.is_process_alive(discovered.window_pid):
                self.inspector.terminate_process(discovered.window_pid)
                self.console.print(f"[dim]Closed old server window PID {discovered.window_pid}[/dim]")
        except DeployError as exc:
            self.logger.warning("Could not close old server window %s: %s", discovered.window_pid, exc)

    def render_wrapper_script(self, config) -> str:
        launcher = os.path.join(config.server_dir, self.host.launcher_name)
        if self.host.is_windows:
            return f"""@echo off
title {WINDOW_TITLE}
echo.
echo ========================================
echo   {WINDOW_TITLE}
echo   Starting server with logs...
echo ========================================
echo.
cd /d "{config.server_dir}"
call "{launcher}"
echo.
echo ========================================
echo   Server stopped. Press any key to close.
echo ========================================
pause
"""

        return f"""#!/bin/sh
printf '\\033]0;%s\\007' {shlex.quote(WINDOW_TITLE)}
echo
echo "========================================"
echo "  {WINDOW_TITLE}"
echo "  Starting server with logs..."
echo "========================================"
echo
cd {shlex.quote(config.server_dir)} || exit 1
sh {shlex.quote(launcher)}
echo
echo "========================================"
echo "  Server stopped. Press Enter to close."
echo "========================================"
read _
"""

    def write_wrapper_script(self, config) -> str:
        script_path = os.path.join(config.target_root, WRAPPER_SCRIPT_STEM + self.host.wrapper_suffix)
        newline = "\r\n" if self.host.is_windows else "\n"
        try:
            with open(script_path, "w", encoding="utf-8", newline=newline) as file_obj:
                file_obj.write(self.render_wrapper_script(config))
        except OSError as exc:
            raise DeployError(
                actionable_error("wrapper_script_failed", path=script_path, reason=str(exc)),
                ErrorKind.RESTART,
            ) from exc

        self.filesystem_service.set_permissions(script_path, SCRIPT_MODE)
        return script_path

    def terminal_command(self, script_path: str) -> List[str]:
        if self.host.is_windows:
            return ["cmd", "/c", "start", "cmd", "/k", script_path]
        if self.host.name == "darwin":
            return ["open", "-a", "Terminal", script_path]

        for terminal, args in LINUX_TERMINALS:
            if self.which(terminal):
                return [terminal] + args + ["sh", script_path]

        raise DeployError(
            actionable_error(
                "terminal_launch_failed",
                reason="no terminal emulator found",
                launcher=self.host.launcher_name,
            ),
            ErrorKind.RESTART,
        )

    def relaunch(self, config, discovered: Optional[DiscoveredProcess] = None):
        """Start the server in a new terminal and schedule wrapper deletion.

        A new window is always created so the logs stay visible. Returns the
        cleanup timer.
        """
        self.close_window(discovered)

        self.console.print("[blue]Creating new terminal window for the server...[/blue]")
        script_path = self.write_wrapper_script(config)

        try:
            cmd = self.terminal_command(script_path)
            self.logger.debug("Launching: %s", " ".join(cmd))
            self.popen(
                cmd,
                cwd=config.target_root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=not self.host.is_windows,
            )
        except DeployError:
            self._remove_wrapper(script_path)
            raise
        except OSError as exc:
            self._remove_wrapper(script_path)
            raise DeployError(
                actionable_error(
                    "terminal_launch_failed",
                    reason=str(exc),
                    launcher=self.host.launcher_name,
                ),
                ErrorKind.RESTART,
            ) from exc

        # No signal tells us the terminal has read the script; the delay is a guess.
        timer = self.timer_factory(self.script_cleanup_delay, self._remove_wrapper, args=(script_path,))
        timer.start()

        self.console.print("[green]Server started in a new terminal window with logs.[/green]")
        return timer

    def _remove_wrapper(self, script_path: str):
        try:
            os.remove(script_path)
            self.logger.debug("Removed wrapper script: %s", script_path)
        except OSError as exc:
            self.logger.debug("Could not remove wrapper script %s: %s", script_path, exc)
