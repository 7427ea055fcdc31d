"""
Pytest configuration for the todo-tracker test suite.

Puts src/ on sys.path so the todo_tracker package imports without installation.
"""
import sys
from pathlib import Path

_src = Path(__file__).parent.parent / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))
