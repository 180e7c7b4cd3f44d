"""Settings loader for sfdeploy."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sfdeploy.errors import DeployError, ErrorKind


class ConfigLoader:
    """Loads YAML settings files for CLI defaults."""

    SUPPORTED_KEYS = {
        "config_file",
        "server_port",
        "java_version",
        "verbose",
        "log_file",
        "lock_release_timeout",
        "script_cleanup_delay",
        "manage_process",
        "pause_on_exit",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DeployError(f"Settings file not found: {config_path}", ErrorKind.CONFIGURATION)

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DeployError(
                f"Invalid settings file '{config_path}': {exc}", ErrorKind.CONFIGURATION
            ) from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DeployError("Settings file must contain a YAML mapping at the root.", ErrorKind.CONFIGURATION)

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise DeployError(f"Unknown settings keys: {unknown_list}", ErrorKind.CONFIGURATION)

        return parsed
