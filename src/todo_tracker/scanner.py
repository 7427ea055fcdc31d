"""Tree walk and marker extraction.

Walks the root in sorted order so repeated runs produce the same item
order (and therefore byte-identical stores). Lines are split on ``\\n`` only
with one trailing ``\\r`` dropped; undecodable bytes are replaced, so binary
files are read as text rather than rejected.
"""
from __future__ import annotations
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .models import TodoItem
from .policy import InclusionPolicy

logger = logging.getLogger(__name__)

MARKER_STYLES = ("anywhere", "comment")
DEFAULT_MARKER_STYLE = "anywhere"

# tags are ASCII word characters only: [0-9A-Za-z_]
MARKER_PATTERNS = {
    "anywhere": re.compile(r"TODO\[(\w+)\]: (.+)", re.ASCII),
    "comment": re.compile(r"^\s*(?://|#)\s*TODO\[(\w+)\]: (.+)", re.ASCII),
}


class ScanError(Exception):
    """Walking the tree or reading a file failed; the run must abort."""


@dataclass
class ScanResult:
    todos: List[TodoItem] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # oversized, never opened
    unreadable: List[str] = field(default_factory=list)  # only with skip_unreadable


def marker_pattern(style: str = DEFAULT_MARKER_STYLE) -> re.Pattern[str]:
    try:
        return MARKER_PATTERNS[style]
    except KeyError:
        raise ValueError(f"Invalid marker style: {style}") from None


def extract_marker(line: str, pattern: Optional[re.Pattern[str]] = None) -> Optional[Tuple[str, str]]:
    """Return (tag, description) for the first marker on the line, if any."""
    m = (pattern or MARKER_PATTERNS[DEFAULT_MARKER_STYLE]).search(line)
    if m is None:
        return None
    return m.group(1), m.group(2)


def iter_lines(path: str, encoding: str = "utf-8") -> Iterator[Tuple[int, str]]:
    """Yield (line_number, text) pairs; the last unterminated line is included."""
    with open(path, "rb") as f:
        for number, raw in enumerate(f, start=1):
            if raw.endswith(b"\n"):
                raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            yield number, raw.decode(encoding, errors="replace")


def scan_file(path: str, pattern: Optional[re.Pattern[str]] = None) -> List[TodoItem]:
    items: List[TodoItem] = []
    for number, text in iter_lines(path):
        found = extract_marker(text, pattern)
        if found:
            tag, description = found
            items.append(TodoItem(tag=tag, description=description, file=path, line=number))
    return items


def _raise_walk_error(exc: OSError) -> None:
    raise ScanError(f"cannot read directory {exc.filename}: {exc.strerror or exc}") from exc


def _visit_file(path: str, policy: InclusionPolicy, pattern: re.Pattern[str],
                result: ScanResult, skip_unreadable: bool) -> None:
    if not policy.should_scan(path):
        logger.debug("Excluded %s", path)
        return
    try:
        size = os.stat(path).st_size
        if policy.is_oversized(size):
            logger.info("Skipping %s (%d bytes, limit %d)", path, size, policy.max_file_size)
            result.skipped.append(path)
            return
        result.todos.extend(scan_file(path, pattern))
    except OSError as exc:
        if not skip_unreadable:
            raise ScanError(f"cannot read {path}: {exc.strerror or exc}") from exc
        logger.warning("Skipping unreadable file %s: %s", path, exc)
        result.unreadable.append(path)


def scan_todos(root: str = ".",
               policy: Optional[InclusionPolicy] = None,
               pattern: Optional[re.Pattern[str]] = None,
               skip_unreadable: bool = False) -> ScanResult:
    """Walk ``root`` and collect markers plus the files too large to read.

    Raises ScanError on the first walk or read failure unless
    ``skip_unreadable`` is set, in which case single-file failures are
    recorded in ``ScanResult.unreadable`` and the walk continues.
    """
    policy = policy or InclusionPolicy()
    pattern = pattern or marker_pattern()
    result = ScanResult()
    root = os.path.normpath(root)

    if not os.path.exists(root):
        raise ScanError(f"root does not exist: {root}")
    if not os.path.isdir(root):
        _visit_file(root, policy, pattern, result, skip_unreadable)
        return result
    if policy.is_denied(root):
        logger.debug("Root %s is denied; nothing to scan", root)
        return result

    for dirpath, dirnames, filenames in os.walk(root, topdown=True, onerror=_raise_walk_error):
        # prune in place; sorted for a stable visiting order
        dirnames[:] = sorted(
            d for d in dirnames
            if policy.should_descend(os.path.normpath(os.path.join(dirpath, d)))
        )
        for fname in sorted(filenames):
            path = os.path.normpath(os.path.join(dirpath, fname))
            _visit_file(path, policy, pattern, result, skip_unreadable)

    logger.info("Scanned %s: %d todos, %d skipped", root, len(result.todos), len(result.skipped))
    return result
