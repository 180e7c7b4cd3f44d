"""Actionable error catalog for sfdeploy."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "source_not_found": {
        "what": "Source directory not found: {path}",
        "next": "Check the path of the SmartFox extension project.",
    },
    "source_without_sources": {
        "what": "No .java files found under {path}.",
        "next": "Point to a project directory containing a `src` folder with Java sources.",
    },
    "target_not_found": {
        "what": "SmartFox server installation not found at {path}.",
        "next": "Point to the directory that contains `SFS2X/{launcher}`.",
    },
    "invalid_extension_name": {
        "what": "Invalid extension folder name: '{name}'.",
        "next": "Enter a simple folder name such as `MyExtension` (no paths, colons, or slashes).",
    },
    "toolchain_not_found": {
        "what": "Java {version} compiler not found.",
        "next": "Install JDK {version}, set JAVA_HOME, or add `javac` to PATH.",
    },
    "no_sources": {
        "what": "No Java files found in {path}.",
        "next": "Add sources under the `src` folder before deploying.",
    },
    "compile_failed": {
        "what": "Compilation failed:\n{output}",
        "next": "Fix the compiler errors above and run the deploy again.",
    },
    "package_failed": {
        "what": "JAR creation failed:\n{output}",
        "next": "Check that `jar` belongs to the configured JDK and the source folder is writable.",
    },
    "copy_failed": {
        "what": "Failed to copy {source} to {destination}: {reason}",
        "next": "Make sure the server is stopped and the extension folder is writable.",
    },
    "extension_dir_failed": {
        "what": "Failed to create extension directory {path}: {reason}",
        "next": "Check permissions on the SmartFox installation directory.",
    },
    "wrapper_script_failed": {
        "what": "Failed to create launcher script {path}: {reason}",
        "next": "Check permissions on the SmartFox installation directory.",
    },
    "terminal_launch_failed": {
        "what": "Failed to start server: {reason}",
        "next": "Start the server manually with `{launcher}` and check the terminal setup.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
