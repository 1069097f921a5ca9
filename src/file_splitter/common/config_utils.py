"""Configuration utilities."""

import tempfile
import platformdirs
from pathlib import Path
from typing import Any


def expand_path_variables(path: Any) -> Any:
    """Expand ${VAR} variables in paths.

    Supported variables:
        ${USER_HOME}: User's home directory
        ${USER_DATA}: User data directory
        ${USER_CACHE}: User cache directory
        ${TEMP}: Temporary directory

    Args:
        path: Path string with variables (other types are returned unchanged)

    Returns:
        Expanded path string
    """
    if not isinstance(path, str):
        return path

    replacements = {
        "${USER_HOME}": str(Path.home()),
        "${USER_DATA}": platformdirs.user_data_dir(),
        "${USER_CACHE}": platformdirs.user_cache_dir(),
        "${TEMP}": tempfile.gettempdir(),
    }

    for var, value in replacements.items():
        path = path.replace(var, value)

    return path


def expand_config_paths(config: dict) -> dict:
    """Expand path variables in every string value of a nested config dict."""
    result = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = expand_config_paths(value)
        else:
            result[key] = expand_path_variables(value)
    return result
