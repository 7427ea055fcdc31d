"""Color & style helpers for diagnostics on stderr.

Decisions:
- Stdout carries the Markdown report and is never styled.
- Styling is enabled when stderr is a TTY or FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
"""
from __future__ import annotations
import logging
import os, sys

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stderr.isatty()) and not _NO_COLOR

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
RED = _code('31')
YELLOW = _code('33')
CYAN = _code('36')

ERROR_COLOR = RED + BOLD
LEVEL_COLOR = {
    'DEBUG': DIM,
    'INFO': CYAN,
    'WARNING': YELLOW,
    'ERROR': RED,
    'CRITICAL': RED + BOLD,
}

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET


class LevelFormatter(logging.Formatter):
    """``LEVEL: message`` with the level name colored when styling is on."""

    def __init__(self) -> None:
        super().__init__("%(levelname)s: %(message)s")

    def formatMessage(self, record: logging.LogRecord) -> str:
        styled = color(record.levelname, LEVEL_COLOR.get(record.levelname, ''))
        return f"{styled}: {record.message}"

__all__ = [
    'color','RESET','BOLD','DIM','ERROR_COLOR','LEVEL_COLOR','LevelFormatter','_ENABLE','_FORCE'
]
