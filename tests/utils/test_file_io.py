# tests/utils/test_file_io.py
"""Unit tests for `simplr.utils.file_io`: loading lines and atomic writes."""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from simplr.utils import file_io
from simplr.utils.file_io import FileLoadError, detect_encoding, load_lines, split_lines, write_atomic


# --- split_lines ---
@pytest.mark.parametrize(
    "text, expected",
    [
        ("", []),
        ("a", ["a"]),
        ("a\n", ["a"]),
        ("a\nb", ["a", "b"]),
        ("a\n\nb\n", ["a", "", "b"]),
        ("\n", [""]),
        ("a\r\nb\r\n", ["a", "b"]),
        ("a\r\r\n", ["a"]),
    ],
)
def test_split_lines(text: str, expected: list[str]) -> None:
    assert split_lines(text) == expected


# --- detect_encoding ---
def test_detect_encoding_always_ends_with_fallbacks() -> None:
    assert detect_encoding(b"")[-2:] == ["utf-8", "latin-1"]
    with patch.object(file_io.chardet, "detect", return_value={"encoding": "UTF-16", "confidence": 0.99}):
        assert detect_encoding(b"x") == ["utf-16", "utf-8", "latin-1"]


def test_detect_encoding_ignores_low_confidence() -> None:
    with patch.object(file_io.chardet, "detect", return_value={"encoding": "Big5", "confidence": 0.3}):
        assert detect_encoding(b"x") == ["utf-8", "latin-1"]


# --- load_lines ---
def test_load_lines_three_line_file(tmp_path: Path) -> None:
    path = tmp_path / "f.txt"
    path.write_bytes(b"ab\tc\n\nxyz\n")
    lines, encoding = load_lines(str(path))
    assert lines == ["ab\tc", "", "xyz"]
    assert encoding


def test_load_lines_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")
    assert load_lines(str(path)) == ([], "utf-8")


def test_load_lines_utf8(tmp_path: Path) -> None:
    path = tmp_path / "u.txt"
    path.write_bytes("naïve café\nżółw\n".encode("utf-8"))
    lines, _ = load_lines(str(path))
    assert lines == ["naïve café", "żółw"]


def test_load_lines_falls_back_when_guess_fails(tmp_path: Path) -> None:
    path = tmp_path / "l.txt"
    path.write_bytes(b"\xff\xfe\xfd\n")
    with patch.object(file_io.chardet, "detect", return_value={"encoding": "ascii", "confidence": 1.0}):
        lines, encoding = load_lines(str(path))
    assert encoding == "latin-1"
    assert lines == ["\xff\xfe\xfd"]


def test_load_lines_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileLoadError) as excinfo:
        load_lines(str(tmp_path / "missing.txt"))
    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.filename == str(tmp_path / "missing.txt")


# --- write_atomic ---
def test_write_atomic_creates_file(tmp_path: Path) -> None:
    path = tmp_path / "out.txt"
    assert write_atomic(str(path), b"hello\n") == 6
    assert path.read_bytes() == b"hello\n"
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_write_atomic_keeps_existing_permissions(tmp_path: Path) -> None:
    path = tmp_path / "script.sh"
    path.write_bytes(b"old")
    os.chmod(path, 0o755)
    write_atomic(str(path), b"new")
    assert path.read_bytes() == b"new"
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o755


def test_write_atomic_through_symlink_keeps_link(tmp_path: Path) -> None:
    target = tmp_path / "real.txt"
    target.write_bytes(b"old")
    link = tmp_path / "link.txt"
    link.symlink_to(target)
    write_atomic(str(link), b"new")
    assert link.is_symlink()
    assert target.read_bytes() == b"new"


def test_write_atomic_failure_leaves_target_untouched(tmp_path: Path) -> None:
    path = tmp_path / "keep.txt"
    path.write_bytes(b"original")
    with patch.object(file_io.os, "replace", side_effect=OSError(28, "No space left on device")):
        with pytest.raises(OSError):
            write_atomic(str(path), b"new content")
    assert path.read_bytes() == b"original"
    assert [p.name for p in tmp_path.iterdir()] == ["keep.txt"]


def test_write_atomic_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        write_atomic(str(tmp_path / "nope" / "f.txt"), b"x")
