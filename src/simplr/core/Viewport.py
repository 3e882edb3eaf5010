# simplr/core/Viewport.py
"""Cursor position and scroll offsets of the editing window."""

import logging
from typing import Optional

from simplr.core.TextBuffer import DEFAULT_TAB_STOP, Row, TextBuffer
from simplr.ui.KeyDecoder import Key


def column_to_render_column(row: Optional[Row], cx: int, tab_stop: int = DEFAULT_TAB_STOP) -> int:
    """Maps logical column *cx* of *row* to its on-screen column.

    Uses the same tab rule as :func:`simplr.core.TextBuffer.expand_tabs`, so
    the result is where ``row.render`` shows the character at ``cx``.
    """
    if row is None:
        return 0
    rx = 0
    for ch in row.chars[:cx]:
        if ch == "\t":
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


class Viewport:
    """
    Tracks the cursor (``cx``, ``cy``), its render column ``rx`` and the
    scroll offsets of the visible text area.

    ``cy`` ranges over ``0..numrows``; ``numrows`` itself is the position
    just past the last line, where typing creates a new row. ``rx`` is never
    set directly; :meth:`reconcile` derives it from ``cx`` before each frame.
    """

    def __init__(self, screenrows: int, screencols: int, tab_stop: int = DEFAULT_TAB_STOP) -> None:
        self.cx: int = 0
        self.cy: int = 0
        self.rx: int = 0
        self.rowoff: int = 0
        self.coloff: int = 0
        self.screenrows = screenrows
        self.screencols = screencols
        self.tab_stop = tab_stop

    def resize(self, screenrows: int, screencols: int) -> None:
        logging.debug("Viewport resized to %dx%d", screenrows, screencols)
        self.screenrows = max(1, screenrows)
        self.screencols = max(1, screencols)

    def reconcile(self, buffer: TextBuffer) -> None:
        """Recomputes ``rx`` and scrolls so the cursor lies inside the window."""
        row = buffer.row(self.cy)
        self.rx = column_to_render_column(row, self.cx, self.tab_stop) if row else 0

        if self.cy < self.rowoff:
            self.rowoff = self.cy
        if self.cy >= self.rowoff + self.screenrows:
            self.rowoff = self.cy - self.screenrows + 1
        if self.rx < self.coloff:
            self.coloff = self.rx
        if self.rx >= self.coloff + self.screencols:
            self.coloff = self.rx - self.screencols + 1

    def move_cursor(self, key: int, buffer: TextBuffer) -> None:
        """Moves the cursor one step in the direction of an arrow *key*.

        Left and Right wrap across line boundaries. After the move ``cx`` is
        clamped to the length of the row the cursor landed on.
        """
        row = buffer.row(self.cy)

        if key == Key.ARROW_LEFT:
            if self.cx != 0:
                self.cx -= 1
            elif self.cy > 0:
                self.cy -= 1
                self.cx = buffer.row(self.cy).size
        elif key == Key.ARROW_RIGHT:
            if row is not None and self.cx < row.size:
                self.cx += 1
            elif row is not None and self.cx == row.size:
                self.cy += 1
                self.cx = 0
        elif key == Key.ARROW_UP:
            if self.cy != 0:
                self.cy -= 1
        elif key == Key.ARROW_DOWN:
            if self.cy < buffer.numrows:
                self.cy += 1

        row = buffer.row(self.cy)
        rowlen = row.size if row else 0
        if self.cx > rowlen:
            self.cx = rowlen
