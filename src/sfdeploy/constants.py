"""Shared constants for sfdeploy."""

CONFIG_FILE = "sfdeploy_config.json"
SETTINGS_FILE = ".sfdeploy.yml"

SERVER_PORT = 9933
REQUIRED_JAVA_VERSION = "11"

SOURCE_DIR_NAME = "src"
SOURCE_SUFFIX = ".java"
COMPILED_SUFFIX = ".class"
ARCHIVE_SUFFIX = ".jar"
ARTIFACT_NAME = "ServerExtension.jar"

SERVER_DIR_NAME = "SFS2X"
LIBRARY_DIR_NAME = "lib"
EXTENSIONS_DIR_NAME = "extensions"
EXPECTED_LIBRARY_ARCHIVES = ("sfs2x.jar", "sfs2x-core.jar")

FORBIDDEN_EXTENSION_CHARS = (":", "\\", "/")

# Heuristic waits, tunable through the settings file.
LOCK_RELEASE_TIMEOUT_SECONDS = 3.0
LOCK_RELEASE_POLL_SECONDS = 0.25
SCRIPT_CLEANUP_DELAY_SECONDS = 5.0

WRAPPER_SCRIPT_STEM = "sfs_with_logs"
WINDOW_TITLE = "SmartFox Server 2X - Hot Deploy"

SCRIPT_MODE = 0o755
