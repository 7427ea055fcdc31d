"""Persistence helpers (load/save) for the TODO tracker store.

Decisions:
- A missing store is an empty tracker, never an error.
- Any other load failure (bad JSON, wrong shape, unreadable file) follows the
  ``on_corrupt`` policy: ``reset`` logs a warning and starts empty, ``fail``
  raises StoreError. Tracking state is regenerable, so ``reset`` is default.
  Under ``reset`` a single malformed entry is dropped with a warning; the
  remaining entries keep their dates.
- Saves go to a temp file in the target directory and are renamed over the
  store, so an interrupted write leaves the previous store intact.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .models import TodoTracker

logger = logging.getLogger(__name__)

TRACKER_FILE = 'todo_tracker.json'
CORRUPT_POLICIES = ('reset', 'fail')

PathLike = Union[str, 'os.PathLike[str]']


class StoreError(Exception):
    """Loading (under the ``fail`` policy) or saving the store failed."""


class Storage:
    @staticmethod
    def load_tracker(path: PathLike = TRACKER_FILE, on_corrupt: str = 'reset') -> TodoTracker:
        """Load the tracker from disk.

        Missing file -> empty tracker. Other failures depend on ``on_corrupt``.
        """
        if on_corrupt not in CORRUPT_POLICIES:
            raise ValueError(f'Invalid corrupt-store policy: {on_corrupt}')
        store = Path(path)
        try:
            with open(store, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if on_corrupt == 'fail':
                return TodoTracker.from_dict(data)
            return TodoTracker.from_dict(data, on_invalid=lambda index, exc: logger.warning(
                'Dropping todo entry %d from %s: %s', index, store, exc))
        except FileNotFoundError:
            logger.debug('No tracker at %s; starting empty', store)
            return TodoTracker()
        except (OSError, ValueError) as exc:  # JSONDecodeError is a ValueError
            if on_corrupt == 'fail':
                raise StoreError(f'cannot load {store}: {exc}') from exc
            logger.warning('Discarding unusable tracker %s: %s', store, exc)
            return TodoTracker()

    @staticmethod
    def save_tracker(path: PathLike, tracker: TodoTracker) -> None:
        """Persist the tracker (pretty-printed, 2-space indent)."""
        store = Path(path)
        payload = json.dumps(tracker.to_dict(), indent=2, ensure_ascii=False) + '\n'
        tmp_name = None
        try:
            store.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f'.{store.name}.', suffix='.tmp', dir=store.parent)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_name, store)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f'cannot write {store}: {exc}') from exc
        logger.debug('Saved %d todos to %s', len(tracker), store)
