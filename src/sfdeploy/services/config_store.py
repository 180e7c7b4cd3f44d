"""Persistence of the deployment configuration between runs."""

import json
import os
import tempfile
from typing import Optional

from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.models import DeployConfig


class ConfigStore:
    """Reads and atomically writes the JSON deployment config."""

    def __init__(self, config_file: str, logger):
        self.config_file = config_file
        self.logger = logger

    def load(self) -> Optional[DeployConfig]:
        """Returns the saved config, or None when absent or unreadable."""
        if not os.path.exists(self.config_file):
            return None

        try:
            with open(self.config_file, "r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Could not read config file '%s': %s", self.config_file, exc)
            return None

        if not isinstance(data, dict):
            self.logger.warning("Config file '%s' has invalid format.", self.config_file)
            return None

        try:
            return DeployConfig.from_dict(data)
        except ValueError as exc:
            self.logger.warning("Config file '%s' has invalid content: %s", self.config_file, exc)
            return None

    def save(self, config: DeployConfig):
        directory = os.path.dirname(os.path.abspath(self.config_file))
        os.makedirs(directory, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(prefix="sfdeploy-config-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(config.to_dict(), file_obj, indent=2)
                file_obj.write("\n")
            os.replace(temp_path, self.config_file)
        except OSError as exc:
            raise DeployError(
                f"Could not write config file '{self.config_file}': {exc}",
                ErrorKind.CONFIGURATION,
            ) from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
