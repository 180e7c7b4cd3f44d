"""Process and network introspection behind one seam per operating system.

All parsing of ``netstat``/``tasklist``/``lsof``/``ps`` output lives in this
module. Parsers are tolerant: unexpected lines are skipped and a miss is an
empty result, never an error.
"""

import csv
import io
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from sfdeploy.errors import DeployError
from sfdeploy.models import ProcessInfo


def parse_netstat_listeners(output: str, port: int) -> List[int]:
    """PIDs from ``netstat -ano`` rows listening on ``port``."""
    pids: List[int] = []
    suffix = f":{port}"
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 5 or "LISTENING" not in parts:
            continue
        if not parts[1].endswith(suffix):
            continue
        try:
            pid = int(parts[-1])
        except ValueError:
            continue
        if pid not in pids:
            pids.append(pid)
    return pids


def parse_wmic_parent(output: str) -> Optional[int]:
    """Parent PID from ``wmic ... get ParentProcessId /format:csv`` output."""
    for line in reversed(output.splitlines()):
        fields = [field.strip() for field in line.split(",")]
        if not fields or not fields[-1] or fields[0] == "Node":
            continue
        try:
            return int(fields[-1])
        except ValueError:
            continue
    return None


def parse_tasklist_image(output: str, pid: int) -> Optional[str]:
    """Image name of ``pid`` from ``tasklist /fo csv /nh`` output."""
    for row in csv.reader(io.StringIO(output)):
        if len(row) >= 2 and row[1].strip() == str(pid):
            return row[0].strip()
    return None


def parse_pid_lines(output: str) -> List[int]:
    pids: List[int] = []
    for line in output.splitlines():
        line = line.strip()
        if line.isdigit() and int(line) not in pids:
            pids.append(int(line))
    return pids


class ProcessInspector(ABC):
    """Queries and controls OS processes for the process manager."""

    def __init__(self, command_runner, logger):
        self.command_runner = command_runner
        self.logger = logger

    @abstractmethod
    def list_listening_processes_on_port(self, port: int) -> List[int]:
        raise NotImplementedError

    @abstractmethod
    def find_parent_process(self, pid: int) -> Optional[ProcessInfo]:
        raise NotImplementedError

    @abstractmethod
    def is_process_alive(self, pid: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def terminate_process(self, pid: int) -> bool:
        raise NotImplementedError

    def _output(self, cmd: List[str]) -> str:
        result = self.command_runner.run(cmd, check=False, capture_output=True)
        return result.stdout or ""


class WindowsProcessInspector(ProcessInspector):
    def list_listening_processes_on_port(self, port: int) -> List[int]:
        return parse_netstat_listeners(self._output(["netstat", "-ano"]), port)

    def find_parent_process(self, pid: int) -> Optional[ProcessInfo]:
        parent_pid = self._parent_pid(pid)
        if parent_pid is None:
            return None

        name = self._image_name(parent_pid)
        if name is None:
            return None
        return ProcessInfo(pid=parent_pid, name=name)

    def is_process_alive(self, pid: int) -> bool:
        return self._image_name(pid) is not None

    def terminate_process(self, pid: int) -> bool:
        result = self.command_runner.run(
            ["taskkill", "/PID", str(pid), "/F"],
            check=False,
            capture_output=True,
        )
        return result.returncode == 0

    def _parent_pid(self, pid: int) -> Optional[int]:
        try:
            output = self._output(
                ["wmic", "process", "where", f"ProcessId={pid}", "get", "ParentProcessId", "/format:csv"]
            )
        except DeployError:
            # wmic is gone from recent Windows builds.
            output = self._output(
                [
                    "powershell",
                    "-NoProfile",
                    "-Command",
                    f"(Get-CimInstance Win32_Process -Filter 'ProcessId={pid}').ParentProcessId",
                ]
            )
        return parse_wmic_parent(output)

    def _image_name(self, pid: int) -> Optional[str]:
        output = self._output(["tasklist", "/fi", f"PID eq {pid}", "/fo", "csv", "/nh"])
        return parse_tasklist_image(output, pid)


class PosixProcessInspector(ProcessInspector):
    def list_listening_processes_on_port(self, port: int) -> List[int]:
        return parse_pid_lines(self._output(["lsof", "-nP", f"-iTCP:{port}", "-sTCP:LISTEN", "-t"]))

    def find_parent_process(self, pid: int) -> Optional[ProcessInfo]:
        parents = parse_pid_lines(self._output(["ps", "-o", "ppid=", "-p", str(pid)]))
        if not parents:
            return None

        parent_pid = parents[0]
        name = self._output(["ps", "-o", "comm=", "-p", str(parent_pid)]).strip()
        if not name:
            return None
        return ProcessInfo(pid=parent_pid, name=os.path.basename(name))

    def is_process_alive(self, pid: int) -> bool:
        return pid in parse_pid_lines(self._output(["ps", "-o", "pid=", "-p", str(pid)]))

    def terminate_process(self, pid: int) -> bool:
        result = self.command_runner.run(["kill", "-9", str(pid)], check=False, capture_output=True)
        return result.returncode == 0


def create_process_inspector(host, command_runner, logger) -> ProcessInspector:
    if host.is_windows:
        return WindowsProcessInspector(command_runner, logger)
    return PosixProcessInspector(command_runner, logger)
