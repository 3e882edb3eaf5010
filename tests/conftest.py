# tests/conftest.py
"""Pytest configuration with shared fixtures for the Simplr editor tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from simplr.core.Simplr import Simplr
from simplr.utils.utils import DEFAULT_CONFIG
from tests.stubs import FakeTerminal


# --- Base fixtures for the terminal and configuration ---
@pytest.fixture
def mock_config() -> dict[str, dict[str, Any]]:
    """Provide the embedded default configuration (deep-copied per test).

    Returns:
        dict[str, dict[str, Any]]: Editor configuration dictionary.
    """
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def fake_terminal() -> FakeTerminal:
    """A 24x80 scripted terminal (22 text rows plus the two bars)."""
    return FakeTerminal(rows=24, cols=80)


# --- Simplr fixtures ---
@pytest.fixture
def real_editor(fake_terminal: FakeTerminal, mock_config: dict[str, dict[str, Any]]) -> Simplr:
    """Create a real `Simplr` instance on top of the fake terminal.

    Returns:
        Simplr: An editor with an empty buffer and no file name.
    """
    return Simplr(fake_terminal, mock_config)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A three-line file whose first line contains a tab."""
    path = tmp_path / "sample.txt"
    path.write_bytes(b"ab\tc\n\nxyz\n")
    return path


@pytest.fixture
def editor_with_text(real_editor: Simplr, sample_file: Path) -> Simplr:
    """Provide a `Simplr` instance with `sample_file` loaded."""
    real_editor.open_file(str(sample_file))
    return real_editor
