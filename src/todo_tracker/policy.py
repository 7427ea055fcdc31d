"""Inclusion policy: which directories are walked and which files are read.

Decisions:
- The deny-list is always active. It starts with the action's own working
  folder and grows with ``--blacklist`` entries; ``--whitelist`` entries
  remove names from it again (negation, not a separate allow-list).
- Every deny entry is tried three ways: as a base name and as an extension
  (both case-insensitive) and as a prefix of the walked path (case-sensitive).
- A denied directory prunes its whole subtree; a denied file is only skipped.
- ``allowlist`` mode additionally restricts files to known source/config
  extensions and drops dotfiles and tool folders. Dot-directories such as
  ``.github`` are still walked; only the named tool folders are pruned.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

MODES = ("denylist", "allowlist")
DEFAULT_MODE = "denylist"
MAX_FILE_SIZE = 500 * 1024  # 500 KB

BASE_DENYLIST: FrozenSet[str] = frozenset({
    ".action-tmp",  # folder itself when executing the GitHub Action
})

EXCLUDED_NAMES: FrozenSet[str] = frozenset({
    ".git", ".vscode", ".idea", ".ds_store", "thumbs.db", "__pycache__",
})

EXTENSIONLESS_NAMES: FrozenSet[str] = frozenset({"dockerfile", "makefile"})

SOURCE_EXTENSIONS: FrozenSet[str] = frozenset({
    # source code & scripting
    ".c", ".h", ".cpp", ".hpp", ".java", ".js", ".jsx", ".ts", ".tsx",
    ".py", ".go", ".cs", ".rb", ".php", ".sh", ".swift", ".kt", ".rs",
    # configuration & markup
    ".html", ".htm", ".css", ".scss", ".less", ".xml", ".yaml", ".yml",
    ".md", ".sql",
})


def parse_token_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated option value; blanks are dropped."""
    if not raw:
        return []
    return [tok.strip() for tok in raw.split(",") if tok.strip()]


def _base_and_ext(path: str) -> tuple[str, str]:
    base = os.path.basename(path).lower()
    return base, os.path.splitext(base)[1]


@dataclass(frozen=True)
class InclusionPolicy:
    denylist: FrozenSet[str] = BASE_DENYLIST
    mode: str = DEFAULT_MODE
    max_file_size: int = MAX_FILE_SIZE
    _lowered: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Invalid policy mode: {self.mode}")
        if self.max_file_size < 0:
            raise ValueError("max_file_size must not be negative")
        object.__setattr__(self, "_lowered", frozenset(e.lower() for e in self.denylist))

    @classmethod
    def build(cls,
              blacklist: Iterable[str] = (),
              whitelist: Iterable[str] = (),
              mode: str = DEFAULT_MODE,
              max_file_size: int = MAX_FILE_SIZE) -> "InclusionPolicy":
        """Base deny-list plus blacklist entries, minus whitelist entries."""
        entries = set(BASE_DENYLIST)
        entries.update(e for e in blacklist if e)
        entries.difference_update(whitelist)
        return cls(denylist=frozenset(entries), mode=mode, max_file_size=max_file_size)

    # -------------------- deny-list --------------------
    def is_denied(self, path: str) -> bool:
        base, ext = _base_and_ext(path)
        if base in self._lowered or ext in self._lowered or path in self.denylist:
            return True
        return any(path.startswith(entry) for entry in self.denylist if entry)

    # -------------------- allow-list --------------------
    def _is_tool_or_hidden(self, path: str) -> bool:
        base, _ = _base_and_ext(path)
        return base in EXCLUDED_NAMES or base.startswith(".")

    def is_allowed_file(self, path: str) -> bool:
        """Allow-list check for files; always True in denylist mode."""
        if self.mode != "allowlist":
            return True
        if self._is_tool_or_hidden(path):
            return False
        base, ext = _base_and_ext(path)
        if base in EXTENSIONLESS_NAMES:
            return True
        return ext in SOURCE_EXTENSIONS

    # -------------------- walk decisions --------------------
    def should_descend(self, path: str) -> bool:
        if self.is_denied(path):
            return False
        if self.mode != "allowlist":
            return True
        base, _ = _base_and_ext(path)
        return base not in EXCLUDED_NAMES

    def should_scan(self, path: str) -> bool:
        return not self.is_denied(path) and self.is_allowed_file(path)

    def is_oversized(self, size: int) -> bool:
        return size > self.max_file_size
