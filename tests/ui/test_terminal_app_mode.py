# tests/ui/test_terminal_app_mode.py
"""Unit tests for `TerminalAppMode` with `termios`, `os` and `signal` mocked out.

No real tty is touched: attribute lists are plain Python lists and every
system call is replaced with a `MagicMock`.
"""

import errno
import termios
from unittest.mock import call, patch

import pytest

from simplr.ui.TerminalAppMode import TerminalAppMode, TerminalError

MODULE = "simplr.ui.TerminalAppMode"


def make_attrs() -> list:
    cc = [0] * 32
    return [0xFFFF, 0xFFFF, 0, 0xFFFF, 38400, 38400, cc]


@pytest.fixture
def mocked_termios():
    with patch(f"{MODULE}.termios.tcgetattr", side_effect=lambda fd: make_attrs()) as get, \
            patch(f"{MODULE}.termios.tcsetattr") as set_, \
            patch(f"{MODULE}.atexit.register") as register, \
            patch(f"{MODULE}.signal.signal", return_value=None) as sig:
        yield {"get": get, "set": set_, "register": register, "signal": sig}


def test_enter_applies_raw_mode_flags(mocked_termios) -> None:
    term = TerminalAppMode(fd_in=5, fd_out=6, read_timeout=0.1)
    term.enter()

    fd, when, raw = mocked_termios["set"].call_args.args
    assert fd == 5
    assert when == termios.TCSAFLUSH
    iflag, oflag, cflag, lflag = raw[0], raw[1], raw[2], raw[3]
    for flag in (termios.BRKINT, termios.ICRNL, termios.INPCK, termios.ISTRIP, termios.IXON):
        assert not iflag & flag
    assert not oflag & termios.OPOST
    assert cflag & termios.CS8
    for flag in (termios.ECHO, termios.ICANON, termios.IEXTEN, termios.ISIG):
        assert not lflag & flag
    assert raw[6][termios.VMIN] == 0
    assert raw[6][termios.VTIME] == 1
    mocked_termios["register"].assert_called_once_with(term.restore)
    assert term.active


def test_restore_reapplies_saved_attributes_once(mocked_termios) -> None:
    term = TerminalAppMode(fd_in=5)
    term.enter()
    mocked_termios["set"].reset_mock()

    term.restore()
    term.restore()

    mocked_termios["set"].assert_called_once_with(5, termios.TCSAFLUSH, make_attrs())
    assert not term.active


def test_restore_without_enter_is_safe(mocked_termios) -> None:
    TerminalAppMode().restore()
    mocked_termios["set"].assert_not_called()


def test_enter_failure_raises_terminal_error(mocked_termios) -> None:
    mocked_termios["get"].side_effect = termios.error(25, "Inappropriate ioctl for device")
    with pytest.raises(TerminalError):
        TerminalAppMode().enter()


def test_context_manager_clears_screen_on_error(mocked_termios) -> None:
    with patch(f"{MODULE}.os.write", side_effect=lambda fd, data: len(data)) as write:
        with pytest.raises(RuntimeError):
            with TerminalAppMode(fd_out=7):
                raise RuntimeError("boom")
    write.assert_called_once_with(7, b"\x1b[2J\x1b[H")
    assert mocked_termios["set"].call_count == 2


def test_context_manager_normal_exit_does_not_clear(mocked_termios) -> None:
    with patch(f"{MODULE}.os.write") as write:
        with TerminalAppMode():
            pass
    write.assert_not_called()


def test_read_byte() -> None:
    with patch(f"{MODULE}.os.read", side_effect=[b"a", b""]):
        term = TerminalAppMode()
        assert term.read_byte() == ord("a")
        assert term.read_byte() is None


@pytest.mark.parametrize("code", [errno.EAGAIN, errno.EINTR])
def test_read_byte_retryable_errors_mean_no_byte(code: int) -> None:
    with patch(f"{MODULE}.os.read", side_effect=OSError(code, "retry")):
        assert TerminalAppMode().read_byte() is None


def test_read_byte_fatal_error() -> None:
    with patch(f"{MODULE}.os.read", side_effect=OSError(errno.EIO, "I/O error")):
        with pytest.raises(TerminalError):
            TerminalAppMode().read_byte()


def test_write_handles_short_writes() -> None:
    with patch(f"{MODULE}.os.write", side_effect=[3, 2]) as write:
        TerminalAppMode(fd_out=9).write(b"hello")
    assert write.call_args_list == [call(9, b"hello"), call(9, b"lo")]


def test_write_failure_raises_terminal_error() -> None:
    with patch(f"{MODULE}.os.write", side_effect=OSError(errno.EIO, "I/O error")):
        with pytest.raises(TerminalError):
            TerminalAppMode().write(b"x")


def test_query_window_size_uses_ioctl() -> None:
    with patch(f"{MODULE}.os.get_terminal_size", return_value=(100, 30)):
        assert TerminalAppMode().query_window_size() == (30, 100)


def test_query_window_size_falls_back_to_cursor_report() -> None:
    term = TerminalAppMode()
    reply = iter(b"\x1b[41;132R")
    with patch(f"{MODULE}.os.get_terminal_size", return_value=(0, 0)), \
            patch.object(term, "write") as write, \
            patch.object(term, "read_byte", side_effect=lambda: next(reply, None)):
        assert term.query_window_size() == (41, 132)
    assert write.call_args_list == [call(b"\x1b[999C\x1b[999B"), call(b"\x1b[6n")]


def test_query_window_size_fails_without_reply() -> None:
    term = TerminalAppMode()
    with patch(f"{MODULE}.os.get_terminal_size", side_effect=OSError(errno.ENOTTY, "not a tty")), \
            patch.object(term, "write"), \
            patch.object(term, "read_byte", return_value=None):
        with pytest.raises(TerminalError):
            term.query_window_size()


def test_sigwinch_sets_resize_flag(mocked_termios) -> None:
    term = TerminalAppMode()
    term.enter()
    handler = mocked_termios["signal"].call_args.args[1]
    assert term.consume_resize() is False
    handler(28, None)
    assert term.consume_resize() is True
    assert term.consume_resize() is False


def test_signal_outside_main_thread_is_tolerated(mocked_termios) -> None:
    mocked_termios["signal"].side_effect = ValueError("signal only works in main thread")
    term = TerminalAppMode()
    term.enter()
    term.restore()
    assert not term.active


def test_restore_failure_is_logged(mocked_termios) -> None:
    term = TerminalAppMode()
    term.enter()
    mocked_termios["set"].side_effect = termios.error(5, "I/O error")
    with patch(f"{MODULE}.logging.error") as log_error:
        term.restore()
    assert log_error.called
