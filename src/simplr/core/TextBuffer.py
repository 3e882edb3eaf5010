# simplr/core/TextBuffer.py
"""simplr.core.TextBuffer
=========================

The document model of the Simplr editor.

A document is an ordered list of :class:`Row` objects, one per line. Each row
keeps its raw text (``chars``) and a derived, tab-expanded form (``render``)
that the screen renderer draws. Rows are identified by their index in the
buffer, never by object identity, because inserts and deletes shift indices.

``render`` can only go stale if ``chars`` changes without it being rebuilt,
so ``chars`` is read-only from the outside and every mutating method on
:class:`Row` regenerates ``render`` before returning.
"""

import logging
from typing import Iterator, Optional

DEFAULT_TAB_STOP = 8


def expand_tabs(chars: str, tab_stop: int = DEFAULT_TAB_STOP) -> str:
    """Returns *chars* with every tab expanded to the next multiple of *tab_stop*.

    A tab always produces at least one space.
    """
    out: list[str] = []
    col = 0
    for ch in chars:
        if ch == "\t":
            out.append(" ")
            col += 1
            while col % tab_stop != 0:
                out.append(" ")
                col += 1
        else:
            out.append(ch)
            col += 1
    return "".join(out)


class Row:
    """One line of the document in raw and rendered form."""

    __slots__ = ("_chars", "_render", "_tab_stop")

    def __init__(self, chars: str = "", tab_stop: int = DEFAULT_TAB_STOP) -> None:
        if "\n" in chars:
            raise ValueError("a row cannot contain a newline")
        self._tab_stop = tab_stop
        self._chars = chars
        self._render = ""
        self._update()

    def __repr__(self) -> str:
        return f"Row({self._chars!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._chars == other._chars

    __hash__ = None  # type: ignore[assignment]

    @property
    def chars(self) -> str:
        return self._chars

    @property
    def size(self) -> int:
        return len(self._chars)

    @property
    def render(self) -> str:
        return self._render

    @property
    def rsize(self) -> int:
        return len(self._render)

    def _update(self) -> None:
        self._render = expand_tabs(self._chars, self._tab_stop)

    def insert_char(self, at: int, ch: str) -> None:
        """Inserts *ch* before column *at*; out-of-range columns append."""
        if len(ch) != 1 or ch == "\n":
            raise ValueError(f"cannot insert {ch!r} into a row")
        if at < 0 or at > self.size:
            at = self.size
        self._chars = self._chars[:at] + ch + self._chars[at:]
        self._update()

    def delete_char(self, at: int) -> bool:
        """Removes the character at column *at*. Returns False if out of range."""
        if at < 0 or at >= self.size:
            return False
        self._chars = self._chars[:at] + self._chars[at + 1:]
        self._update()
        return True

    def append_string(self, text: str) -> None:
        self._chars += text
        self._update()

    def truncate(self, length: int) -> str:
        """Cuts the row to *length* characters and returns the removed tail."""
        length = max(0, min(length, self.size))
        tail = self._chars[length:]
        self._chars = self._chars[:length]
        self._update()
        return tail


class TextBuffer:
    """Ordered sequence of rows plus the dirty counter.

    Every mutation increments ``dirty``; a value of zero means the buffer
    matches what was last loaded or saved. An empty document has zero rows,
    not one empty row.
    """

    def __init__(self, tab_stop: int = DEFAULT_TAB_STOP) -> None:
        self.tab_stop = tab_stop
        self._rows: list[Row] = []
        self.dirty: int = 0

    # --- read access ---
    @property
    def numrows(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def row(self, index: int) -> Optional[Row]:
        """Returns the row at *index*, or None for the past-the-end position."""
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def lines(self) -> list[str]:
        return [r.chars for r in self._rows]

    # --- whole-buffer operations ---
    def load(self, lines: list[str]) -> None:
        """Replaces the content with *lines* and marks the buffer clean."""
        self._rows = [Row(line, self.tab_stop) for line in lines]
        self.dirty = 0
        logging.debug("TextBuffer loaded with %d rows", len(self._rows))

    def mark_clean(self) -> None:
        self.dirty = 0

    def serialize(self, encoding: str = "utf-8") -> bytes:
        """Returns the persisted form: every row followed by one newline."""
        return "".join(r.chars + "\n" for r in self._rows).encode(encoding, errors="replace")

    # --- row operations ---
    def insert_row(self, at: int, text: str = "") -> None:
        """Inserts a new row at position *at*, clamped to 0..numrows."""
        at = max(0, min(at, len(self._rows)))
        self._rows.insert(at, Row(text, self.tab_stop))
        self.dirty += 1

    def delete_row(self, at: int) -> bool:
        if at < 0 or at >= len(self._rows):
            return False
        del self._rows[at]
        self.dirty += 1
        return True

    # --- character operations ---
    def insert_char(self, row_index: int, at: int, ch: str) -> None:
        self._rows[row_index].insert_char(at, ch)
        self.dirty += 1

    def delete_char(self, row_index: int, at: int) -> bool:
        if self._rows[row_index].delete_char(at):
            self.dirty += 1
            return True
        return False

    def append_string(self, row_index: int, text: str) -> None:
        self._rows[row_index].append_string(text)
        self.dirty += 1

    def split_row(self, row_index: int, at: int) -> None:
        """Moves the text after column *at* of a row onto a new following row."""
        tail = self._rows[row_index].truncate(at)
        self.insert_row(row_index + 1, tail)

    def join_with_previous(self, row_index: int) -> int:
        """Appends a row to the one above it and removes it.

        Returns the column in the previous row where the joined text begins.
        """
        previous = self._rows[row_index - 1]
        join_at = previous.size
        self.append_string(row_index - 1, self._rows[row_index].chars)
        self.delete_row(row_index)
        return join_at
