# src/simplr/ui/TerminalAppMode.py
from __future__ import annotations

import atexit
import errno
import logging
import os
import re
import signal
import termios
from typing import Any, Optional


CURSOR_POSITION_REPLY = re.compile(rb"\x1b\[(\d+);(\d+)R")

CLEAR_SCREEN = b"\x1b[2J\x1b[H"


class TerminalError(OSError):
    """Fatal failure to configure or talk to the controlling terminal."""


class TerminalAppMode:
    """
    Put the terminal into raw mode for the editor and give it back afterwards.

    - Input: no echo, no line buffering, no signal keys (Ctrl-C, Ctrl-Z),
      no software flow control (Ctrl-S, Ctrl-Q), no CR-to-NL translation.
    - Output: no post-processing, so ``\\r\\n`` must be written explicitly.
    - Reads time out after ``read_timeout`` seconds (VMIN=0, VTIME>0).

    The original attributes are saved once and restored by ``restore()``,
    which is idempotent and also registered with ``atexit``. Use as a context
    manager or pair ``enter()`` with ``restore()`` in try/finally.
    """

    def __init__(self, fd_in: int = 0, fd_out: int = 1, read_timeout: float = 0.1) -> None:
        self.fd_in = fd_in
        self.fd_out = fd_out
        self.read_timeout = read_timeout
        self._saved_attrs: Optional[list[Any]] = None
        self._old_winch_handler: Any = None
        self._resize_pending: bool = False
        self._atexit_registered: bool = False

    # ── context manager ──────────────────────────────────────────────────────

    def __enter__(self) -> "TerminalAppMode":
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            try:
                self.clear_screen()
            except OSError:
                logging.debug("TerminalAppMode: could not clear screen on error exit.")
        self.restore()

    # ── mode switching ───────────────────────────────────────────────────────

    def enter(self) -> None:
        if self._saved_attrs is not None:
            return
        try:
            self._saved_attrs = termios.tcgetattr(self.fd_in)
        except termios.error as e:
            raise TerminalError(f"tcgetattr: {e}") from e

        raw = termios.tcgetattr(self.fd_in)
        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = max(1, int(round(self.read_timeout * 10)))
        try:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, raw)
        except termios.error as e:
            self._saved_attrs = None
            raise TerminalError(f"tcsetattr: {e}") from e

        if not self._atexit_registered:
            atexit.register(self.restore)
            self._atexit_registered = True

        try:
            self._old_winch_handler = signal.signal(signal.SIGWINCH, self._on_sigwinch)
        except ValueError:
            # signal handlers can only be installed from the main thread
            self._old_winch_handler = None
        logging.debug("TerminalAppMode: entered raw mode.")

    def restore(self) -> None:
        if self._saved_attrs is None:
            return
        try:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, self._saved_attrs)
        except termios.error as e:
            logging.error("TerminalAppMode: failed to restore terminal: %s", e)
        self._saved_attrs = None

        if self._old_winch_handler is not None:
            try:
                signal.signal(signal.SIGWINCH, self._old_winch_handler)
            except ValueError:
                pass
            self._old_winch_handler = None
        logging.debug("TerminalAppMode: restored original terminal attributes.")

    @property
    def active(self) -> bool:
        return self._saved_attrs is not None

    # ── resize tracking ──────────────────────────────────────────────────────

    def _on_sigwinch(self, signum, frame) -> None:
        self._resize_pending = True

    def consume_resize(self) -> bool:
        """Returns True once per window resize since the last call."""
        pending = self._resize_pending
        self._resize_pending = False
        return pending

    # ── I/O ──────────────────────────────────────────────────────────────────

    def read_byte(self) -> Optional[int]:
        """Reads one byte, or returns None when the read timeout expires."""
        try:
            data = os.read(self.fd_in, 1)
        except OSError as e:
            if e.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalError(e.errno, f"read: {e.strerror}") from e
        if not data:
            return None
        return data[0]

    def write(self, data: bytes) -> None:
        """Writes *data* with a single ``os.write``, looping only on short writes."""
        try:
            written = os.write(self.fd_out, data)
            while written < len(data):
                written += os.write(self.fd_out, data[written:])
        except OSError as e:
            raise TerminalError(e.errno, f"write: {e.strerror}") from e

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)

    def query_window_size(self) -> tuple[int, int]:
        """Returns the terminal size as ``(rows, cols)``.

        Falls back to moving the cursor to the bottom-right corner and asking
        the terminal where it ended up when the size ioctl is unavailable.
        """
        try:
            cols, rows = os.get_terminal_size(self.fd_out)
            if cols > 0 and rows > 0:
                return rows, cols
        except OSError as e:
            logging.debug("TerminalAppMode: size ioctl failed (%s), using cursor query.", e)

        self.write(b"\x1b[999C\x1b[999B")
        return self._query_cursor_position()

    def _query_cursor_position(self) -> tuple[int, int]:
        self.write(b"\x1b[6n")
        reply = bytearray()
        while len(reply) < 32:
            byte = self.read_byte()
            if byte is None:
                break
            reply.append(byte)
            if byte == ord("R"):
                break
        match = CURSOR_POSITION_REPLY.search(bytes(reply))
        if not match:
            raise TerminalError(f"getWindowSize: unexpected cursor reply {bytes(reply)!r}")
        return int(match.group(1)), int(match.group(2))
