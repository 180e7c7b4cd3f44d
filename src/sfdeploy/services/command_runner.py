"""Subprocess execution service for sfdeploy."""

import subprocess
from typing import List, Optional

from sfdeploy.errors import DeployError, ErrorKind


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        combine_output: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """Run ``cmd``.

        With ``combine_output`` stderr is folded into stdout, so
        ``result.stdout`` holds the interleaved text the tool printed.
        """
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout
        capture = capture_output or combine_output

        try:
            if combine_output:
                result = subprocess.run(
                    cmd,
                    text=True,
                    errors="replace",
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    cwd=cwd,
                    timeout=effective_timeout,
                )
            else:
                result = subprocess.run(
                    cmd,
                    text=True,
                    errors="replace",
                    capture_output=capture_output,
                    cwd=cwd,
                    timeout=effective_timeout,
                )
        except FileNotFoundError as exc:
            raise DeployError(
                f"Required command not found: {cmd[0]}. Please install it and try again.",
                ErrorKind.COMMAND,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise DeployError(
                f"Command timed out after {effective_timeout}s: {cmd_str}",
                ErrorKind.COMMAND,
            ) from exc
        except Exception as exc:
            raise DeployError(f"Failed to execute command: {cmd_str}. {exc}", ErrorKind.COMMAND) from exc

        if capture and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        if combine_output:
            detail = (result.stdout or "").strip()
        else:
            detail = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if detail:
            message = f"{message}\n{detail}"

        if check:
            raise DeployError(message, ErrorKind.COMMAND)

        self.logger.debug(message)
        return result
