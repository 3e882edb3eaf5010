# src/simplr/ui/KeyDecoder.py
"""Decoding of raw terminal bytes into key events.

A key event is a plain ``int``: the byte value for ordinary characters and
control keys, or a :class:`Key` member (values of 1000 and up, so they never
collide with a byte) for the navigation keys a VT100 terminal sends as
escape sequences.
"""
from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from simplr.utils.logging_config import KEY_LOGGER


ESC = 0x1B
BACKSPACE = 0x7F
ENTER = ord("\r")
TAB = ord("\t")


def ctrl_key(ch: str) -> int:
    """Returns the byte a terminal sends for Ctrl + *ch* (``ctrl_key("q") == 17``)."""
    return ord(ch) & 0x1F


class Key(enum.IntEnum):
    ARROW_LEFT = 1000
    ARROW_RIGHT = 1001
    ARROW_UP = 1002
    ARROW_DOWN = 1003
    PAGE_UP = 1004
    PAGE_DOWN = 1005
    DEL_KEY = 1006
    HOME = 1007
    END = 1008


class DecoderState(enum.Enum):
    IDLE = "idle"
    SAW_ESC = "saw_esc"
    SAW_BRACKET_OR_O = "saw_bracket_or_o"
    SAW_DIGIT = "saw_digit"


# Sequences as they follow the leading ESC byte.
ESCAPE_SEQUENCE_MAP: dict[bytes, Key] = {
    b"[A": Key.ARROW_UP, b"[B": Key.ARROW_DOWN,
    b"[C": Key.ARROW_RIGHT, b"[D": Key.ARROW_LEFT,

    b"[H": Key.HOME, b"[F": Key.END,
    b"OH": Key.HOME, b"OF": Key.END,

    b"[1~": Key.HOME, b"[7~": Key.HOME,
    b"[4~": Key.END, b"[8~": Key.END,
    b"[3~": Key.DEL_KEY,
    b"[5~": Key.PAGE_UP, b"[6~": Key.PAGE_DOWN,
}


class KeyDecoder:
    """
    Turns the byte stream of a raw-mode terminal into key events.

    ``read_byte`` is any callable returning the next input byte as an ``int``
    or ``None`` when its read timeout expires; in the editor it is
    :meth:`TerminalAppMode.read_byte`.

    After an ESC the decoder always tries to read two more bytes, and a third
    when the second is a digit following ``[``. A timeout at any of those
    points, or a sequence missing from :data:`ESCAPE_SEQUENCE_MAP`, yields a
    bare ESC and drops the bytes already consumed.
    """

    def __init__(self, read_byte: Callable[[], Optional[int]]) -> None:
        self._read_byte = read_byte
        self.state = DecoderState.IDLE

    def next(self) -> int:
        """Blocks until a key event is available and returns it."""
        while True:
            key = self.poll()
            if key is not None:
                return key

    def poll(self) -> Optional[int]:
        """Returns one key event, or None if no byte arrived within the timeout."""
        first = self._read_byte()
        if first is None:
            return None
        if first != ESC:
            self._trace(bytes([first]), first)
            return first
        key = self._decode_escape()
        self.state = DecoderState.IDLE
        return key

    def _decode_escape(self) -> int:
        self.state = DecoderState.SAW_ESC
        seq = bytearray()

        first = self._read_byte()
        if first is None:
            return self._finish(seq, ESC)
        seq.append(first)
        second = self._read_byte()
        if second is None:
            return self._finish(seq, ESC)
        seq.append(second)

        if first in (ord("["), ord("O")):
            self.state = DecoderState.SAW_BRACKET_OR_O
            if first == ord("[") and ord("0") <= second <= ord("9"):
                self.state = DecoderState.SAW_DIGIT
                third = self._read_byte()
                if third is None:
                    return self._finish(seq, ESC)
                seq.append(third)

        key = ESCAPE_SEQUENCE_MAP.get(bytes(seq))
        if key is None:
            logging.debug("KeyDecoder: unknown escape sequence ESC + %r", bytes(seq))
            return self._finish(seq, ESC)
        return self._finish(seq, key)

    def _finish(self, seq: bytearray, key: int) -> int:
        self._trace(b"\x1b" + bytes(seq), key)
        return key

    @staticmethod
    def _trace(raw: bytes, key: int) -> None:
        name = Key(key).name if key in Key._value2member_map_ else key
        KEY_LOGGER.debug("raw=%r key=%s", raw, name)
