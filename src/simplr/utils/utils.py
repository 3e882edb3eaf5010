# simplr/utils/utils.py
"""
simplr.utils.utils
==================

Core utility functions for the Simplr editor.

- Automatic User Configuration: creates ``config.toml`` and ``.env`` templates
  in ``~/.config/simplr`` on first run.
- Robust Configuration Loading: starts from the embedded default
  configuration and recursively merges user settings from
  ``~/.config/simplr/config.toml`` over it.
- Helper Utilities: dictionary deep-merge.

The editor is always runnable, even if user configuration files are missing
or corrupted, by falling back to the embedded defaults.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("simplr")

# --- Constants ---
SIMPLR_VERSION = "v.1"

ENV_TEMPLATE = """# Environment switches for the Simplr editor.
# Set to 1 to record every decoded key event in keytrace.log.
SIMPLR_KEYTRACE=
"""

# Hardcoded representation of the shipped `config.toml`.
# It is the ultimate fallback, so the editor can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "tab_stop": 8,
        "quit_times": 1,
        "status_message_timeout": 5,
        "read_timeout": 0.1,
        "default_encoding": "utf-8",
    },
    "keybindings": {
        "quit": "ctrl+q",
        "save_file": "ctrl+s",
        "refresh": "ctrl+l",
    },
    "logging": {
        "log_dir": "~/.config/simplr/logs",
        "file_level": "INFO",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
}


# --- Helper Functions ---

def get_config_dir() -> Path:
    """Returns the per-user configuration directory."""
    return Path.home() / ".config" / "simplr"


def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    return Path(__file__).resolve().parents[3]


def ensure_user_config_exists() -> None:
    """Checks for user config files in `~/.config/simplr` and creates them if missing."""
    try:
        config_dir = get_config_dir()
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.is_file():
                user_config_path.write_text(
                    source_config_path.read_text(encoding="utf-8"), encoding="utf-8"
                )
            else:
                user_config_path.write_text(toml.dumps(DEFAULT_CONFIG), encoding="utf-8")
            logger.info("Created user config template at: %s", user_config_path)

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info("Created user .env template at: %s", user_env_path)

    except Exception as e:
        logger.critical("Could not create user configuration files: %s", e, exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = get_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info("Successfully loaded and merged user config from %s", user_config_path)
        except Exception as e:
            logger.error("Could not parse user config '%s': %s. Using defaults.", user_config_path, e)

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
