# tests/test_key_debugger.py
"""Tests for the developer key debugger."""

from unittest.mock import patch

import pytest

import key_debugger
from simplr.ui.KeyDecoder import Key
from tests.stubs import FakeTerminal


@pytest.mark.parametrize(
    "key, expected",
    [
        (Key.PAGE_DOWN, "Key.PAGE_DOWN"),
        (27, "ESC (27)"),
        (127, "Backspace (127)"),
        (13, "Enter (13)"),
        (9, "Tab (9)"),
        (17, "Ctrl-Q (17)"),
        (ord("a"), "'a' (97)"),
        (200, "byte 200 (0xc8)"),
    ],
)
def test_describe_key(key: int, expected: str) -> None:
    assert key_debugger.describe_key(key) == expected


def test_main_prints_keys_until_q() -> None:
    term = FakeTerminal()
    term.feed(b"\x1b[Ax\x11q")

    with patch.object(key_debugger, "TerminalAppMode") as mode:
        mode.return_value.__enter__.return_value = term
        key_debugger.main()

    output = b"".join(term.writes)
    assert b"Key.ARROW_UP\r\n" in output
    assert b"'x' (120)\r\n" in output
    assert b"Ctrl-Q (17)\r\n" in output
    mode.return_value.__exit__.assert_called_once()
