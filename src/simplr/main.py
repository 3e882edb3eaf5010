# src/simplr/main.py
"""
Simplr Main Entry Point
=======================

This module is the entry point of the ``simplr`` console script. It performs:
1) Environment Loading: reads ~/.config/simplr/.env early, so switches such as
   SIMPLR_KEYTRACE are visible to the logging setup.
2) Configuration & Logging: loads config and initializes logging.
3) Terminal Mode: enters raw mode inside a context manager that restores the
   terminal on every exit path.
4) Application Run: instantiates Simplr, loads the file named on the command
   line (if any) and starts its main loop.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from simplr.core.Simplr import Simplr
from simplr.ui.TerminalAppMode import TerminalAppMode, TerminalError
from simplr.utils.file_io import FileLoadError
from simplr.utils.logging_config import setup_logging
from simplr.utils.utils import get_config_dir, load_config


logger = logging.getLogger("simplr")


def _load_environment() -> None:
    """Loads ``~/.config/simplr/.env`` into the process environment, if present."""
    try:
        load_dotenv(dotenv_path=get_config_dir() / ".env")
    except OSError as e:
        print(f"Warning: could not read .env file: {e}", file=sys.stderr)


def _resolve_cli_path(argv: list[str]) -> Optional[str]:
    """Returns the optional file argument from argv[1], expanded to a user path."""
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return str(Path(raw).expanduser())


def run_editor(config: dict[str, Any], file_to_open: Optional[str]) -> None:
    """Runs one editing session inside raw terminal mode.

    Raises:
        TerminalError: The terminal cannot be configured or read.
        FileLoadError: *file_to_open* cannot be loaded.
    """
    read_timeout = float(config.get("editor", {}).get("read_timeout", 0.1))
    with TerminalAppMode(read_timeout=read_timeout) as terminal:
        editor = Simplr(terminal, config)
        if file_to_open:
            editor.open_file(file_to_open)
        editor.run()


def start(argv: Optional[list[str]] = None) -> None:
    """Console script entry point. Exits with status 1 on a fatal error."""
    if argv is None:
        argv = sys.argv

    # --- Step 1: Environment ---
    _load_environment()

    # --- Step 2: Configuration and logging ---
    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger.info("Simplr editor starting up...")

    file_to_open = _resolve_cli_path(argv)

    # --- Step 3 and 4: Terminal mode and editor loop ---
    try:
        run_editor(config, file_to_open)
    except FileLoadError as e:
        logger.critical("Could not load '%s': %s", file_to_open, e)
        print(f"fopen: {e}", file=sys.stderr)
        sys.exit(1)
    except TerminalError as e:
        logger.critical("Terminal failure: %s", e, exc_info=True)
        print(f"terminal: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Simplr editor shut down gracefully.")


if __name__ == "__main__":
    start()
