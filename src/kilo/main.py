# src/kilo/main.py
"""
kilo Main Entry Point
=====================

Console entry point (``kilo [path]``):
1) Configuration & Logging: loads config and initializes logging first.
2) Locale: enables the user's locale so curses handles wide characters.
3) Curses Wrapper: sets up/tears down curses safely around the editor.
4) Application Run: opens the CLI path (existing or new) and starts the loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from kilo.ui.App import App
from kilo.utils.logging_config import setup_logging
from kilo.utils.utils import load_config


logger = logging.getLogger("kilo")


def _resolve_cli_path(argv: list[str]) -> Optional[str]:
    """Optional path from argv[1], user-expanded. It need not exist yet."""
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return str(Path(raw).expanduser())


def main_app_runner(stdscr: "curses.window", config: dict[str, Any], file_to_open: Optional[str]) -> None:
    """Target for `curses.wrapper`: builds the app and runs its loop."""
    app = App(stdscr, config)

    # Ctrl+Z is delivered as a key in raw mode; ignore the signal as well.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    app.open(file_to_open)
    app.run()


def start() -> None:
    """Loads configuration, sets up logging and runs the editor under curses."""
    config = load_config()
    setup_logging(config)
    logger.info("kilo editor starting up...")

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    file_to_open = _resolve_cli_path(sys.argv)
    try:
        curses.wrapper(main_app_runner, config, file_to_open)
        logger.info("kilo editor shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
