"""Host platform capabilities, resolved once per run."""

import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class HostPlatform:
    """Everything that differs between operating systems."""

    name: str
    executable_suffix: str
    classpath_separator: str
    launcher_name: str
    wrapper_suffix: str
    shell_names: Tuple[str, ...]
    toolchain_patterns: Tuple[str, ...]
    target_candidates: Tuple[str, ...]
    search_drives: Tuple[str, ...] = ()
    supports_process_control: bool = True

    @property
    def is_windows(self) -> bool:
        return self.name == "windows"

    def executable(self, directory: str, tool: str) -> str:
        return os.path.join(directory, tool + self.executable_suffix)

    def candidate_target_dirs(self, home: Optional[str] = None) -> List[str]:
        """Installation roots probed, in order, when auto-detecting the server."""
        candidates = list(self.target_candidates)
        if home:
            candidates.extend(
                [
                    os.path.join(home, "SmartFoxServer_2X"),
                    os.path.join(home, "SmartFoxServer"),
                    os.path.join(home, "Desktop", "SmartFoxServer_2X"),
                    os.path.join(home, "Downloads", "SmartFoxServer_2X"),
                ]
            )

        for drive in self.search_drives:
            for folder in ("SmartFoxServer_2X", "SmartFoxServer", "SFS2X"):
                candidates.append(drive + "\\" + folder)
                candidates.append(drive + "\\Program Files\\" + folder)
                candidates.append(drive + "\\Program Files (x86)\\" + folder)

        return candidates


WINDOWS = HostPlatform(
    name="windows",
    executable_suffix=".exe",
    classpath_separator=";",
    launcher_name="sfs2x.bat",
    wrapper_suffix=".bat",
    shell_names=("cmd.exe", "powershell.exe", "pwsh.exe"),
    toolchain_patterns=(
        "C:\\Program Files\\Eclipse Adoptium\\jdk-11*\\bin\\javac.exe",
        "C:\\Program Files\\Java\\jdk-11*\\bin\\javac.exe",
        "C:\\Program Files\\OpenJDK\\jdk-11*\\bin\\javac.exe",
        "C:\\Program Files (x86)\\Eclipse Adoptium\\jdk-11*\\bin\\javac.exe",
    ),
    target_candidates=(
        "C:\\SmartFoxServer_2X",
        "C:\\Program Files\\SmartFoxServer_2X",
        "C:\\Program Files (x86)\\SmartFoxServer_2X",
    ),
    search_drives=("C:", "D:", "E:", "F:"),
)

LINUX = HostPlatform(
    name="linux",
    executable_suffix="",
    classpath_separator=":",
    launcher_name="sfs2x.sh",
    wrapper_suffix=".sh",
    shell_names=("bash", "sh", "zsh", "fish", "dash"),
    toolchain_patterns=(
        "/usr/lib/jvm/java-11-*/bin/javac",
        "/usr/lib/jvm/jdk-11*/bin/javac",
        "/usr/lib/jvm/temurin-11*/bin/javac",
        "/opt/java/jdk-11*/bin/javac",
    ),
    target_candidates=(
        "/opt/SmartFoxServer_2X",
        "/usr/local/SmartFoxServer_2X",
    ),
)

DARWIN = HostPlatform(
    name="darwin",
    executable_suffix="",
    classpath_separator=":",
    launcher_name="sfs2x.sh",
    wrapper_suffix=".sh",
    shell_names=("bash", "sh", "zsh", "fish", "-zsh", "-bash"),
    toolchain_patterns=(
        "/Library/Java/JavaVirtualMachines/*11*/Contents/Home/bin/javac",
        "/usr/local/opt/openjdk@11/bin/javac",
        "/opt/homebrew/opt/openjdk@11/bin/javac",
    ),
    target_candidates=(
        "/Applications/SmartFoxServer_2X",
    ),
)


def detect_host(platform_name: Optional[str] = None) -> HostPlatform:
    platform_name = platform_name or sys.platform

    if platform_name.startswith("win"):
        return WINDOWS
    if platform_name == "darwin":
        return DARWIN
    if platform_name.startswith("linux"):
        return LINUX

    return HostPlatform(
        name=platform_name,
        executable_suffix="",
        classpath_separator=":",
        launcher_name="sfs2x.sh",
        wrapper_suffix=".sh",
        shell_names=LINUX.shell_names,
        toolchain_patterns=(),
        target_candidates=(),
        supports_process_control=False,
    )
