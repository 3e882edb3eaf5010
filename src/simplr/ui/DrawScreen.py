# simplr/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen: renders the Simplr editor screen with raw VT100 escape sequences.

Every frame is composed off-screen into a single byte string and handed to
the terminal in one write, so the user never sees a half-drawn screen:

- hide the cursor and home it,
- draw the visible text rows (or the welcome banner / empty-line markers),
- draw the reverse-video status bar,
- draw the message bar,
- place the cursor and show it again.
"""

import logging
import time
from typing import TYPE_CHECKING, Optional

from wcwidth import wcwidth

from simplr.utils.utils import SIMPLR_VERSION


if TYPE_CHECKING:
    from simplr.core.Simplr import Simplr


HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CURSOR_HOME = "\x1b[H"
CLEAR_LINE = "\x1b[K"
REVERSE_VIDEO = "\x1b[7m"
RESET_ATTRS = "\x1b[m"

EMPTY_LINE_MARKER = "-"
WELCOME_TEXT = f"Simplr editor - {SIMPLR_VERSION}"
NO_NAME = "[No Name]"
MAX_FILENAME_WIDTH = 20


## ================= class DrawScreen ==============================
class DrawScreen:
    """Composes and emits editor frames.

    Attributes:
        editor (Simplr): The editor whose buffer, viewport and status
            message are drawn.
        frame_encoding (str): Encoding of the bytes sent to the terminal.
    """

    def __init__(self, editor: "Simplr", frame_encoding: str = "utf-8") -> None:
        self.editor = editor
        self.frame_encoding = frame_encoding

    def draw(self) -> None:
        """Reconciles the viewport and writes one complete frame."""
        self.editor.viewport.reconcile(self.editor.buffer)
        self.editor.terminal.write(self.compose_frame())

    def compose_frame(self, now: Optional[float] = None) -> bytes:
        """Returns the bytes of one frame for the current editor state."""
        parts: list[str] = [HIDE_CURSOR, CURSOR_HOME]
        self._draw_rows(parts)
        self._draw_status_bar(parts)
        self._draw_message_bar(parts, time.time() if now is None else now)
        self._position_cursor(parts)
        parts.append(SHOW_CURSOR)
        return "".join(parts).encode(self.frame_encoding, errors="replace")

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`.

        Wide characters are measured with :pyfunc:`wcwidth.wcwidth`;
        non-printable ones count as a single cell.
        """
        result: list[str] = []
        consumed = 0

        for ch in s:
            w = wcwidth(ch)
            if w < 0:
                w = 1
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w

        return "".join(result)

    def _draw_rows(self, parts: list[str]) -> None:
        buffer = self.editor.buffer
        vp = self.editor.viewport

        for y in range(vp.screenrows):
            filerow = y + vp.rowoff
            row = buffer.row(filerow)
            if row is None:
                if buffer.numrows == 0 and y == vp.screenrows // 3:
                    parts.append(self._welcome_line(vp.screencols))
                else:
                    parts.append(EMPTY_LINE_MARKER)
            else:
                length = max(0, min(row.rsize - vp.coloff, vp.screencols))
                parts.append(row.render[vp.coloff:vp.coloff + length])
            parts.append(CLEAR_LINE)
            parts.append("\r\n")

    def _welcome_line(self, screencols: int) -> str:
        welcome = WELCOME_TEXT[:screencols]
        padding = (screencols - len(welcome)) // 2
        line = ""
        if padding:
            line += EMPTY_LINE_MARKER
            padding -= 1
        return line + " " * padding + welcome

    def _draw_status_bar(self, parts: list[str]) -> None:
        """Reverse-video bar: ``name - N lines (file is changed)`` ... ``cy/N``."""
        buffer = self.editor.buffer
        vp = self.editor.viewport
        cols = vp.screencols

        name = self.truncate_string(self.editor.filename or NO_NAME, MAX_FILENAME_WIDTH)
        changed = "(file is changed)" if buffer.dirty else ""
        status = f"{name} - {buffer.numrows} lines {changed}"
        rstatus = f"{vp.cy + 1}/{buffer.numrows}"

        status = status[:cols]
        length = len(status)
        parts.append(REVERSE_VIDEO)
        parts.append(status)
        while length < cols:
            if cols - length == len(rstatus):
                parts.append(rstatus)
                break
            parts.append(" ")
            length += 1
        parts.append(RESET_ATTRS)
        parts.append("\r\n")

    def _draw_message_bar(self, parts: list[str], now: float) -> None:
        parts.append(CLEAR_LINE)
        message = self.editor.current_status_message(now)
        if message:
            parts.append(message[:self.editor.viewport.screencols])

    def _position_cursor(self, parts: list[str]) -> None:
        vp = self.editor.viewport
        y = vp.cy - vp.rowoff + 1
        x = vp.rx - vp.coloff + 1
        logging.debug("Positioning cursor: screen=(%d, %d) logical=(%d, %d)", y, x, vp.cy, vp.cx)
        parts.append(f"\x1b[{y};{x}H")
