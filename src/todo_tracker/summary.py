"""Markdown rendering of the merged todos and of the files left out of a scan.

All functions are pure: they build strings and never print.
"""
import os
from typing import Dict, Iterable, List, Sequence

from .models import TodoItem
from .policy import MAX_FILE_SIZE
from .scanner import ScanResult

SUMMARY_HEADING = "# TODO Summary"
EMPTY_MESSAGE = "No TODOs found."


def group_by_tag(todos: Iterable[TodoItem]) -> Dict[str, List[TodoItem]]:
    """Tags in lexical order; items by ascending date (stable, so ties keep scan order)."""
    groups: Dict[str, List[TodoItem]] = {}
    for t in todos:
        groups.setdefault(t.tag, []).append(t)
    return {tag: sorted(groups[tag], key=lambda t: t.date or '') for tag in sorted(groups)}


def format_item(t: TodoItem) -> str:
    return f"- **{t.date}** ({os.path.basename(t.file)}:{t.line}, {t.file}): {t.description}"


def render_summary(todos: Sequence[TodoItem]) -> str:
    parts = [SUMMARY_HEADING + "\n\n"]
    if not todos:
        parts.append(EMPTY_MESSAGE + "\n")
        return "".join(parts)
    for tag, items in group_by_tag(todos).items():
        parts.append(f"## {tag}\n\n")
        parts.extend(format_item(t) + "\n" for t in items)
        parts.append("\n")
    return "".join(parts)


def _path_section(heading: str, paths: Sequence[str]) -> str:
    if not paths:
        return ""
    body = "".join(f"- {p}\n" for p in paths)
    return f"\n{heading}\n\n{body}\n"


def render_skipped(skipped: Sequence[str], max_file_size: int = MAX_FILE_SIZE) -> str:
    return _path_section(f"# Skipped Files (larger than {max_file_size // 1024} KB)", skipped)


def render_unreadable(paths: Sequence[str]) -> str:
    return _path_section("# Unreadable Files", paths)


def render_report(result: ScanResult, todos: Sequence[TodoItem], max_file_size: int = MAX_FILE_SIZE) -> str:
    """Full stdout document: summary, a blank line, then the optional sections."""
    return (render_summary(todos) + "\n"
            + render_skipped(result.skipped, max_file_size)
            + render_unreadable(result.unreadable))
