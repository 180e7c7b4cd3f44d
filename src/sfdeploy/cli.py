"""Command line entry point for sfdeploy."""

import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    CONFIG_FILE,
    LOCK_RELEASE_TIMEOUT_SECONDS,
    REQUIRED_JAVA_VERSION,
    SCRIPT_CLEANUP_DELAY_SECONDS,
    SERVER_PORT,
    SETTINGS_FILE,
)
from .core import DeploymentPipeline
from .errors import DeployError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML settings file. Defaults to {SETTINGS_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--no-pause",
    is_flag=True,
    default=None,
    help="Exit immediately after a successful deploy instead of waiting for Enter.",
)
def main(config, verbose, log_file, no_pause):
    """Build, deploy and restart a SmartFoxServer 2X extension."""
    logger = logging.getLogger("sfdeploy")
    pause_on_exit = False if no_pause else None

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), SETTINGS_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        settings = config_loader.load(resolved_config)
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, settings, "verbose", default=False))
    log_file = _resolve_option(log_file, settings, "log_file")
    pause_on_exit = bool(_resolve_option(pause_on_exit, settings, "pause_on_exit", default=True))

    try:
        server_port = int(settings.get("server_port", SERVER_PORT))
        lock_release_timeout = float(
            settings.get("lock_release_timeout", LOCK_RELEASE_TIMEOUT_SECONDS)
        )
        script_cleanup_delay = float(
            settings.get("script_cleanup_delay", SCRIPT_CLEANUP_DELAY_SECONDS)
        )
    except (TypeError, ValueError) as exc:
        raise click.ClickException(f"Invalid numeric setting: {exc}") from exc

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    pipeline = DeploymentPipeline(
        config_file=str(settings.get("config_file", CONFIG_FILE)),
        server_port=server_port,
        java_version=str(settings.get("java_version", REQUIRED_JAVA_VERSION)),
        lock_release_timeout=lock_release_timeout,
        script_cleanup_delay=script_cleanup_delay,
        manage_process=bool(settings.get("manage_process", True)),
        pause_on_exit=pause_on_exit,
    )

    raise SystemExit(pipeline.run())


if __name__ == "__main__":
    main()
