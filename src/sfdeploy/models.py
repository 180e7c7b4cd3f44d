"""Shared domain models for sfdeploy."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    ARTIFACT_NAME,
    EXTENSIONS_DIR_NAME,
    LIBRARY_DIR_NAME,
    SERVER_DIR_NAME,
    SOURCE_DIR_NAME,
)
from .errors import ErrorKind


class Phase(str, Enum):
    SETUP = "setup"
    BUILD = "build"
    DEPLOY = "deploy"
    RESTART = "restart"
    CLEANUP = "cleanup"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class DeployConfig:
    """One deployment target, persisted between runs."""

    source_root: str
    target_root: str
    extension_name: str
    toolchain_path: str = ""

    # Keys of the persisted JSON file. Changing them breaks config reuse.
    JSON_KEYS = {
        "source_root": "source_dir",
        "target_root": "target_dir",
        "extension_name": "extension_folder",
        "toolchain_path": "java_path",
    }

    @property
    def sources_dir(self) -> str:
        return os.path.join(self.source_root, SOURCE_DIR_NAME)

    @property
    def artifact_path(self) -> str:
        return os.path.join(self.source_root, ARTIFACT_NAME)

    @property
    def server_dir(self) -> str:
        return os.path.join(self.target_root, SERVER_DIR_NAME)

    @property
    def library_dir(self) -> str:
        return os.path.join(self.server_dir, LIBRARY_DIR_NAME)

    @property
    def extension_dir(self) -> str:
        return os.path.join(self.server_dir, EXTENSIONS_DIR_NAME, self.extension_name)

    def to_dict(self) -> Dict[str, str]:
        return {json_key: getattr(self, attr) for attr, json_key in self.JSON_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployConfig":
        values = {}
        for attr, json_key in cls.JSON_KEYS.items():
            value = data.get(json_key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"'{json_key}' must be a string")
            values[attr] = value
        return cls(**values)


@dataclass(frozen=True)
class ProcessInfo:
    pid: int
    name: str


@dataclass(frozen=True)
class DiscoveredProcess:
    """Server process bound to the well-known port and its hosting window."""

    pid: int
    window_pid: Optional[int] = None


@dataclass(frozen=True)
class PhaseResult:
    phase: Phase
    success: bool
    error_kind: Optional[ErrorKind] = None
    detail: str = ""


@dataclass
class CleanupReport:
    removed_classes: int = 0
    removed_archives: int = 0
    failures: int = 0

    @property
    def removed(self) -> int:
        return self.removed_classes + self.removed_archives


@dataclass
class RunContext:
    """State threaded through the phases of a single run."""

    config: Optional[DeployConfig] = None
    discovered: Optional[DiscoveredProcess] = None
    phase: Phase = Phase.SETUP
    results: List[PhaseResult] = field(default_factory=list)
