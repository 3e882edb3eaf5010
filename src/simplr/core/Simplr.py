# simplr/core/Simplr.py
"""simplr.core.Simplr
============================
Simplr: the editor state aggregate and its main loop.

The :class:`Simplr` object owns everything one editing session needs:

- the terminal handle (raw-mode I/O),
- the text buffer and the viewport (cursor and scroll offsets),
- the key decoder, the renderer (DrawScreen) and the dispatcher (KeyBinder),
- the file name and the encoding the file was loaded with,
- the status message shown in the message bar.

It is passed explicitly to the renderer and dispatcher; there is no global
editor state. Editing operations live here and delegate row mutations to
:class:`~simplr.core.TextBuffer.TextBuffer` and cursor motion to
:class:`~simplr.core.Viewport.Viewport`.
"""

import logging
import time
from typing import Any, Optional

from simplr.core.TextBuffer import TextBuffer
from simplr.core.Viewport import Viewport
from simplr.ui.DrawScreen import DrawScreen
from simplr.ui.KeyBinder import KeyBinder
from simplr.ui.KeyDecoder import BACKSPACE, ENTER, ESC, Key, KeyDecoder, ctrl_key
from simplr.utils.file_io import load_lines, write_atomic
from simplr.utils.logging_config import logger


SAVE_AS_PROMPT = "Save file as(ESC = cancel): {}"


class Simplr:
    """Single-file terminal editor session.

    Args:
        terminal: A raw-mode terminal (``TerminalAppMode`` or a test double)
            providing ``read_byte``, ``write``, ``clear_screen``,
            ``query_window_size`` and ``consume_resize``.
        config: The merged application configuration.
    """

    def __init__(self, terminal: Any, config: dict[str, Any]) -> None:
        self.terminal = terminal
        self.config = config
        editor_cfg = config.get("editor", {})

        self.tab_stop: int = int(editor_cfg.get("tab_stop", 8))
        self.status_message_timeout: float = float(editor_cfg.get("status_message_timeout", 5))
        self.encoding: str = str(editor_cfg.get("default_encoding", "utf-8"))

        self.filename: Optional[str] = None
        self.status_message: str = ""
        self.status_message_time: float = 0.0
        self.running: bool = False

        rows, cols = terminal.query_window_size()
        self.buffer = TextBuffer(self.tab_stop)
        self.viewport = Viewport(max(1, rows - 2), max(1, cols), self.tab_stop)

        self.decoder = KeyDecoder(terminal.read_byte)
        self.renderer = DrawScreen(self)
        self.keybinder = KeyBinder(self)
        logger.debug("Simplr initialized with a %dx%d window", rows, cols)

    # --- Status message ---
    def set_status_message(self, message: str) -> None:
        self.status_message = str(message)
        self.status_message_time = time.time()
        logging.debug("Status message set to: '%s'", self.status_message)

    def current_status_message(self, now: Optional[float] = None) -> str:
        """Returns the status message while it is fresh, else an empty string."""
        if not self.status_message:
            return ""
        if now is None:
            now = time.time()
        if now - self.status_message_time < self.status_message_timeout:
            return self.status_message
        return ""

    # --- File operations ---
    def open_file(self, filename: str) -> None:
        """Loads *filename* into the buffer.

        Raises:
            FileLoadError: The file cannot be read. Fatal at startup.
        """
        lines, encoding = load_lines(filename)
        self.filename = filename
        self.encoding = encoding
        self.buffer.load(lines)
        self.viewport.cx = self.viewport.cy = 0
        self.viewport.rowoff = self.viewport.coloff = 0
        logger.info("Opened '%s' with %d lines", filename, self.buffer.numrows)

    def save_file(self) -> None:
        """Writes the buffer to disk, asking for a file name if there is none.

        Failures are reported in the message bar and leave the buffer dirty.
        """
        if self.filename is None:
            name = self.prompt(SAVE_AS_PROMPT)
            if name is None:
                self.set_status_message("Save canceled.")
                return
            self.filename = name

        data = self.buffer.serialize(self.encoding)
        try:
            written = write_atomic(self.filename, data)
        except OSError as e:
            logger.error("Failed to save '%s': %s", self.filename, e)
            self.set_status_message(f"Couldn't save changes to disk. Error: {e.strerror or e}")
            return

        self.buffer.mark_clean()
        self.set_status_message(f"Changes written to disk({written} bytes)")
        logger.info("Saved '%s' (%d bytes)", self.filename, written)

    def prompt(self, template: str) -> Optional[str]:
        """Collects one line of input in the message bar.

        *template* contains ``{}`` where the typed text is shown. Returns the
        text on Enter (only once something was typed) or None on ESC.
        """
        text = ""
        while True:
            self.set_status_message(template.format(text))
            self.refresh_screen()

            key = self._next_key()
            if key in (Key.DEL_KEY, ctrl_key("h"), BACKSPACE):
                text = text[:-1]
            elif key == ESC:
                self.set_status_message("")
                return None
            elif key == ENTER:
                if text:
                    self.set_status_message("")
                    return text
            elif 0x20 <= key < 0x7F:
                text += chr(key)

    # --- Editing ---
    def insert_char(self, ch: str) -> None:
        vp = self.viewport
        if vp.cy == self.buffer.numrows:
            self.buffer.insert_row(self.buffer.numrows, "")
        self.buffer.insert_char(vp.cy, vp.cx, ch)
        vp.cx += 1

    def handle_enter(self) -> None:
        vp = self.viewport
        if vp.cx == 0:
            self.buffer.insert_row(vp.cy, "")
        else:
            self.buffer.split_row(vp.cy, vp.cx)
        vp.cy += 1
        vp.cx = 0

    def handle_backspace(self) -> None:
        """Deletes the character before the cursor, joining lines at column 0."""
        vp = self.viewport
        if vp.cy == self.buffer.numrows:
            return
        if vp.cx == 0 and vp.cy == 0:
            return
        if vp.cx > 0:
            self.buffer.delete_char(vp.cy, vp.cx - 1)
            vp.cx -= 1
        else:
            vp.cx = self.buffer.join_with_previous(vp.cy)
            vp.cy -= 1

    def handle_delete(self) -> None:
        self.move_cursor(Key.ARROW_RIGHT)
        self.handle_backspace()

    # --- Navigation ---
    def move_cursor(self, key: int) -> None:
        self.viewport.move_cursor(key, self.buffer)

    def handle_home(self) -> None:
        self.viewport.cx = 0

    def handle_end(self) -> None:
        row = self.buffer.row(self.viewport.cy)
        if row is not None:
            self.viewport.cx = row.size

    def handle_page_up(self) -> None:
        vp = self.viewport
        vp.cy = vp.rowoff
        for _ in range(vp.screenrows):
            self.move_cursor(Key.ARROW_UP)

    def handle_page_down(self) -> None:
        vp = self.viewport
        vp.cy = min(vp.rowoff + vp.screenrows - 1, self.buffer.numrows)
        for _ in range(vp.screenrows):
            self.move_cursor(Key.ARROW_DOWN)

    def handle_escape(self) -> None:
        pass

    def refresh(self) -> None:
        """Re-reads the window size and redraws the whole screen."""
        self.handle_resize()
        self.refresh_screen()

    # --- Screen ---
    def refresh_screen(self) -> None:
        self.renderer.draw()

    def handle_resize(self) -> None:
        rows, cols = self.terminal.query_window_size()
        self.viewport.resize(rows - 2, cols)
        logger.info("Window resized to %dx%d", rows, cols)

    def _next_key(self) -> int:
        """Waits for the next key, redrawing when the window is resized meanwhile."""
        while True:
            key = self.decoder.poll()
            if key is not None:
                return key
            if self.terminal.consume_resize():
                self.handle_resize()
                self.refresh_screen()

    # --- Main loop ---
    def run(self) -> None:
        """The main event loop: draw, read one key, dispatch, until quit."""
        logger.info("Editor main loop started.")
        self.set_status_message(self.keybinder.help_message())
        self.running = True

        while self.running:
            try:
                self.refresh_screen()
                key = self._next_key()
                self.keybinder.handle_input(key)
            except KeyboardInterrupt:
                logger.info("Main loop interrupted by KeyboardInterrupt.")
                self.exit_editor()
            except Exception as e:
                logger.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                raise

        logger.info("Editor main loop finished.")

    def exit_editor(self) -> None:
        """Clears the screen and signals the main loop to stop."""
        self.terminal.clear_screen()
        self.running = False
        logger.info("Main loop stop signaled. The application will exit cleanly.")
