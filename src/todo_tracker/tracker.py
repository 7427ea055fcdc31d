"""Reconciliation of a fresh scan against the previously stored items."""
from datetime import date
from typing import Dict, Iterable, List, Optional

from .models import ItemKey, TodoItem

DATE_FORMAT = "%Y-%m-%d"


def today(now: Optional[date] = None) -> str:
    """Run date as YYYY-MM-DD; computed once per run by the caller."""
    return (now or date.today()).strftime(DATE_FORMAT)


def update_todos(old: Iterable[TodoItem], found: Iterable[TodoItem], now: str) -> List[TodoItem]:
    """Date every found item, carrying forward first-seen dates.

    The result has one entry per found item, in found order. Items present
    only in ``old`` are dropped. Should ``old`` hold duplicate keys, the
    last one wins.
    """
    old_map: Dict[ItemKey, TodoItem] = {}
    for t in old:
        old_map[t.key] = t
    updated: List[TodoItem] = []
    for t in found:
        previous = old_map.get(t.key)
        updated.append(t.with_date(previous.date if previous and previous.date else now))
    return updated
