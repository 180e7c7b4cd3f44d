"""Domain errors for sfdeploy."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories reported by pipeline phases."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    TOOLCHAIN = "toolchain"
    BUILD = "build"
    TRANSFER = "transfer"
    PROCESS = "process"
    RESTART = "restart"
    COMMAND = "command"
    INTERNAL = "internal"


class DeployError(RuntimeError):
    """Raised when a deployment phase cannot continue safely."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.INTERNAL):
        super().__init__(message)
        self.kind = kind
