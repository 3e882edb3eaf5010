# simplr/utils/file_io.py
"""
simplr.utils.file_io
====================

Disk access for the editor: loading a file as a list of lines and writing the
serialized buffer back atomically.

Loading detects the file encoding with ``chardet`` and falls back to UTF-8
and finally Latin-1 (which decodes any byte sequence), so a file that opens
can always be written back byte-for-byte in the same encoding.
"""

import logging
import os
import shutil
import tempfile
from typing import Optional

import chardet

logger = logging.getLogger("simplr")

CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75
NEW_FILE_MODE = 0o644


class FileLoadError(OSError):
    """Raised when a file named on the command line cannot be loaded."""


def detect_encoding(raw_data: bytes) -> list[str]:
    """Returns the encodings worth trying for *raw_data*, best guess first."""
    candidates: list[str] = []
    if raw_data:
        result = chardet.detect(raw_data[:CHARDET_SAMPLE_SIZE])
        guess: Optional[str] = result.get("encoding")
        confidence = result.get("confidence") or 0.0
        logger.debug("chardet guessed %r with confidence %.2f", guess, confidence)
        if guess and confidence >= CHARDET_MIN_CONFIDENCE:
            candidates.append(guess.lower())
    for fallback in ("utf-8", "latin-1"):
        if fallback not in candidates:
            candidates.append(fallback)
    return candidates


def split_lines(text: str) -> list[str]:
    """Splits *text* on newlines, stripping trailing CR/LF from every line.

    A final newline terminates the last line rather than starting an empty
    one, so ``"a\\nb\\n"`` yields two lines and ``""`` yields none.
    """
    if not text:
        return []
    pieces = text.split("\n")
    if text.endswith("\n"):
        pieces.pop()
    return [piece.rstrip("\r\n") for piece in pieces]


def load_lines(path: str) -> tuple[list[str], str]:
    """Reads *path* and returns its lines together with the encoding used.

    Raises:
        FileLoadError: The file cannot be opened or read.
    """
    try:
        with open(path, "rb") as f_binary:
            raw_data = f_binary.read()
    except OSError as e:
        logger.error("Failed to open '%s' for loading: %s", path, e)
        raise FileLoadError(e.errno, e.strerror, path) from e

    for encoding in detect_encoding(raw_data):
        try:
            text = raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e_decode:
            logger.warning("Failed to decode '%s' as %s: %s", path, encoding, e_decode)
            continue
        lines = split_lines(text)
        logger.info("Loaded '%s' (%d lines, encoding %s)", path, len(lines), encoding)
        return lines, encoding

    # latin-1 accepts every byte value, so this is unreachable in practice.
    raise FileLoadError(f"could not decode '{path}'")


def write_atomic(path: str, data: bytes) -> int:
    """Writes *data* to *path* atomically and returns the number of bytes written.

    The bytes go to a temporary file in the same directory, which is synced
    and then renamed over *path*. Permission bits of an existing target are
    kept. On failure the target is left untouched and the ``OSError`` is
    propagated. A symlinked target is resolved first so the link survives
    and the file it points to is replaced.
    """
    path = os.path.realpath(path)
    directory = os.path.dirname(path)
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, NEW_FILE_MODE)
        os.replace(tmp_path, path)
    except OSError:
        logger.error("Atomic write to '%s' failed", path, exc_info=True)
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
    logger.debug("Wrote %d bytes to '%s'", len(data), path)
    return len(data)
