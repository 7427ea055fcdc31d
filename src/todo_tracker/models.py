"""Data models for the TODO tracker.

Exposes the TodoItem dataclass and the TodoTracker collection that is
persisted whole on every run. Identity of an item is the exact tuple
(tag, description, file, line); the date is the first day any run saw it.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

ItemKey = Tuple[str, str, str, int]


@dataclass
class TodoItem:
    """A single discovered marker.

    Fields:
        tag: Category captured from ``TODO[tag]``; case-sensitive, never empty.
        description: Remainder of the line after ``]: ``, kept verbatim.
        file: Path as produced by the walk (relative or absolute, like the root).
        line: 1-based line number.
        date: ``YYYY-MM-DD`` first-seen date; None until reconciled.
    """
    tag: str
    description: str
    file: str
    line: int
    date: Optional[str] = None

    @property
    def key(self) -> ItemKey:
        return (self.tag, self.description, self.file, self.line)

    def with_date(self, date: str) -> "TodoItem":
        return replace(self, date=date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': self.tag,
            'description': self.description,
            'file': self.file,
            'line': self.line,
            'date': self.date,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TodoItem":
        """Build an item from its stored form; raises ValueError on bad shape."""
        if not isinstance(raw, Mapping):
            raise ValueError(f'todo entry must be an object, got {type(raw).__name__}')
        for name in ('tag', 'description', 'file', 'date'):
            if not isinstance(raw.get(name), str):
                raise ValueError(f'todo entry field "{name}" must be a string')
        line = raw.get('line')
        # bool is an int subclass; reject it explicitly
        if not isinstance(line, int) or isinstance(line, bool):
            raise ValueError('todo entry field "line" must be an integer')
        return cls(
            tag=raw['tag'],
            description=raw['description'],
            file=raw['file'],
            line=line,
            date=raw['date'],
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"TodoItem({self.tag}, {self.file}:{self.line}, date={self.date})"


@dataclass
class TodoTracker:
    """Persisted store contents: ``{"todos": [...]}``."""
    todos: List[TodoItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {'todos': [t.to_dict() for t in self.todos]}

    @classmethod
    def from_dict(cls, data: Any,
                  on_invalid: Optional[Callable[[int, ValueError], None]] = None) -> "TodoTracker":
        """Build the tracker from its stored document.

        A bad document shape always raises ValueError. A bad entry raises too,
        unless ``on_invalid`` is given: it is then called with the entry index
        and error, and the entry is left out.
        """
        if not isinstance(data, Mapping):
            raise ValueError('tracker document must be a JSON object')
        raw_todos = data.get('todos')
        if raw_todos is None:  # written as null by older runs with nothing found
            return cls()
        if not isinstance(raw_todos, list):
            raise ValueError('"todos" must be a list')
        todos: List[TodoItem] = []
        for index, raw in enumerate(raw_todos):
            try:
                todos.append(TodoItem.from_dict(raw))
            except ValueError as exc:
                if on_invalid is None:
                    raise
                on_invalid(index, exc)
        return cls(todos=todos)

    def __len__(self) -> int:
        return len(self.todos)
