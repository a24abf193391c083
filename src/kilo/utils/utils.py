# kilo/utils/utils.py
"""
kilo.utils.utils
================

Configuration loading and small helpers shared by the UI.

- Embedded defaults: ``DEFAULT_CONFIG`` is the built-in configuration, so the
  editor can always start even without a user file.
- User configuration: ``~/.config/kilo/config.toml`` (TOML) is deep-merged on
  top of the defaults. A missing file is fine; a corrupt one is logged and
  ignored.
- Colour conversion: ``hex_to_xterm`` maps the ``rrggbb`` colours of the
  highlighting theme to the nearest xterm-256 palette index.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger("kilo")

# --- Constants ---
WHITE_FG_IDX = 255

CONFIG_DIR_NAME = "kilo"
CONFIG_FILE_NAME = "config.toml"

# Built-in configuration. Keybinding values are key specs as understood by
# KeyBinder: a string, a list of strings/ints, or "a|b" alternatives.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "highlighting": True,
        "theme": "monokai",
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
    "keybindings": {
        "move_up": "up",
        "move_down": "down",
        "move_left": "left",
        "move_right": "right",
        "line_start": "home",
        "line_end": "end",
        "page_up": "pageup",
        "page_down": "pagedown",
        "buffer_top": ["ctrl+home", "ctrl+pageup"],
        "buffer_bottom": ["ctrl+end", "ctrl+pagedown"],
        "backspace": ["backspace", 8, 127],
        "delete": "del",
        "insert_line": ["enter", 10, 13],
        "tab": "tab",
        "save": "ctrl+s",
        "save_as": "f5",
        "find": "ctrl+f",
        "quit": "ctrl+q",
        "cancel": "esc",
    },
}


def get_config_path() -> Path:
    """Location of the user configuration file."""
    return Path.home() / ".config" / CONFIG_DIR_NAME / CONFIG_FILE_NAME


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


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads the embedded defaults and merges the user's TOML file over them.

    Args:
        config_path: File to read instead of ``~/.config/kilo/config.toml``.

    Returns:
        The merged configuration. Never raises: an unreadable or invalid user
        file is reported in the log and the defaults are used.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    user_config_path = config_path or get_config_path()
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Loaded and merged user config from {user_config_path}")
        except (OSError, toml.TomlDecodeError) as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")
    else:
        logger.debug(f"No user config at {user_config_path}")

    return final_config


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8: return 16
        if r > 248: return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )
