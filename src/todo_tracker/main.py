"""Main entry point for the TODO tracker.

Scans the tree, updates todo_tracker.json, prints the Markdown summary.
Run as ``todo-tracker`` or ``python -m todo_tracker``.
"""
from .cli import cli


def main():
    cli(prog_name="todo-tracker")
