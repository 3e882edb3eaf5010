# src/simplr/core/__init__.py
"""Public facade for simplr.core: re-export main classes from CamelCase modules.

Keeps the CamelCase file names (TextBuffer.py, Viewport.py, Simplr.py),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .Simplr import Simplr  # noqa: F401
from .TextBuffer import Row, TextBuffer  # noqa: F401
from .Viewport import Viewport  # noqa: F401


__all__ = [
    "Row",
    "Simplr",
    "TextBuffer",
    "Viewport",
]
