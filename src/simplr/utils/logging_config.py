# simplr/utils/logging_config.py
"""simplr.utils.logging_config
=============================

Logging configuration for the Simplr editor.

The editor owns the terminal screen while it runs, so nothing may be printed
to stdout/stderr behind its back. All diagnostics therefore go to rotating
log files by default; console output is opt-in.

Features:
    - Rotating file logging for general application events (editor.log).
    - Optional console logging to stderr (disabled by default).
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the SIMPLR_KEYTRACE
      environment variable (it can be set in ``~/.config/simplr/.env``).
    - Automatic creation of the log directory, with fallback to the system
      temp directory on failure.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs.
    - Never raises; all setup errors are reported to stderr.

Globals:
    logger: Main application logger ("simplr").
    KEY_LOGGER: Logger for decoded key-press trace events ("simplr.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import time, unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("simplr")  # main application logger
KEY_LOGGER = logging.getLogger("simplr.keyevents")  # decoded key trace

DEFAULT_LOG_DIR = os.path.join("~", ".config", "simplr", "logs")


def _resolve_log_dir(configured_dir: Optional[str]) -> str:
    """Returns a usable log directory, falling back to the temp directory."""
    log_dir = os.path.expanduser(configured_dir or DEFAULT_LOG_DIR)
    if not os.path.isdir(log_dir):
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as e_mkdir:
            print(
                f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr
            )
            log_dir = tempfile.gettempdir()
            print(f"Logging to temporary directory: '{log_dir}'", file=sys.stderr)
    return log_dir


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler – rotating ``editor.log`` capturing everything from
       ``file_level`` (default INFO) upward.
    2. Console handler – optional ``stderr`` output at ``console_level``
       (default WARNING). Off unless ``log_to_console`` is true.
    3. Error-file handler – optional rotating ``error.log`` holding only
       ERROR and CRITICAL events.
    4. Key-event handler – rotating ``keytrace.log`` attached to the
       ``simplr.keyevents`` logger when ``SIMPLR_KEYTRACE`` is ``1/true/yes``.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is consulted; recognised keys are
            ``log_dir``, ``file_level``, ``console_level``,
            ``log_to_console`` and ``separate_error_log``.

    Side Effects:
        - Creates the log directory if it does not exist.
        - Replaces all handlers on the root logger.
        - Configures ``simplr.keyevents`` to not propagate.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_dir = _resolve_log_dir(logging_config.get("log_dir"))

    log_file_level_str = str(logging_config.get("file_level", "INFO")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.INFO)
    log_filename = os.path.join(log_dir, "editor.log")

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = os.path.join(log_dir, "error.log")
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                error_log_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates

    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    if error_file_handler:
        root_logger.addHandler(error_file_handler)

    root_logger.setLevel(log_file_level)

    # Key Event Logger
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get("SIMPLR_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(log_dir, "keytrace.log")
        try:
            key_trace_handler = logging.handlers.RotatingFileHandler(
                key_trace_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        except Exception as e_keytrace:
            logging.error("Failed to set up key trace logging: %s", e_keytrace, exc_info=True)
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            "File logging to '%s' at level: %s.",
            log_filename,
            logging.getLevelName(file_handler.level),
        )
    if console_handler:
        logging.info(
            "Console logging to stderr at level: %s.",
            logging.getLevelName(console_handler.level),
        )
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
