"""Run settings resolved from the environment and an optional .env file.

Decisions:
- Priority per key: real env var > .env override > built-in default.
- Invalid values are ignored (the next source in priority order is used).
- Settings are resolved once into an immutable object and handed to the
  pipeline; nothing here is module-level mutable state.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .policy import DEFAULT_MODE, MODES
from .scanner import DEFAULT_MARKER_STYLE, MARKER_STYLES
from .storage import CORRUPT_POLICIES, TRACKER_FILE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
ENV_FILE = Path(".env")


@dataclass(frozen=True)
class Settings:
    tracker_path: str = TRACKER_FILE
    mode: str = DEFAULT_MODE
    marker_style: str = DEFAULT_MARKER_STYLE
    on_corrupt: str = "reset"
    log_level: str = "WARNING"


# env key -> (Settings field, validator)
_KEYS: Dict[str, tuple[str, Callable[[str], bool]]] = {
    "TODO_TRACKER_PATH": ("tracker_path", lambda v: bool(v)),
    "TODO_SCAN_MODE": ("mode", lambda v: v in MODES),
    "TODO_MARKER_STYLE": ("marker_style", lambda v: v in MARKER_STYLES),
    "TODO_ON_CORRUPT_STORE": ("on_corrupt", lambda v: v in CORRUPT_POLICIES),
    "TODO_LOG_LEVEL": ("log_level", lambda v: v in LOG_LEVELS),
}


def _normalize(key: str, value: str) -> str:
    value = value.strip()
    if key == "TODO_LOG_LEVEL":
        return value.upper()
    if key == "TODO_TRACKER_PATH":
        return value
    return value.lower()


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines; blanks, comments and unknown keys are skipped."""
    overrides: Dict[str, str] = {}
    if not path.is_file():
        return overrides
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k in _KEYS:
            overrides[k] = v
    return overrides


def load_settings(environ: Optional[Mapping[str, str]] = None,
                  env_file: Optional[Path] = None) -> Settings:
    environ = os.environ if environ is None else environ
    file_values = read_env_file(ENV_FILE if env_file is None else env_file)
    resolved: Dict[str, str] = {}
    for key, (attr, valid) in _KEYS.items():
        for source in (environ, file_values):
            raw = source.get(key)
            if raw is None:
                continue
            value = _normalize(key, raw)
            if valid(value):
                resolved[attr] = value
                break
    return Settings(**resolved)
