"""Command-line entry for the TODO tracker.

One run = scan -> load store -> reconcile -> save store -> print Markdown.
Stdout carries only the Markdown document; diagnostics and logs go to
stderr. Options left unset fall back to Settings (env / .env / defaults).
"""
import logging
from datetime import datetime
from typing import NoReturn, Optional

import click

from .models import TodoTracker
from .policy import MODES, InclusionPolicy, parse_token_list
from .scanner import MARKER_STYLES, ScanError, marker_pattern, scan_todos
from .settings import LOG_LEVELS, load_settings
from .storage import CORRUPT_POLICIES, Storage, StoreError
from .summary import render_report
from .theme import ERROR_COLOR, LevelFormatter, color
from .tracker import today, update_todos

logger = logging.getLogger(__name__)


class _ClickHandler(logging.Handler):
    """Writes records to the current stderr, resolved at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def _configure_logging(level: str) -> None:
    handler = _ClickHandler()
    handler.setFormatter(LevelFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _fail(message: str, exc: Exception) -> NoReturn:
    click.echo(color(f"{message}: {exc}", ERROR_COLOR), err=True)
    raise SystemExit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--root", default=".", show_default=True,
              type=click.Path(file_okay=True, dir_okay=True),
              help="Root directory to scan")
@click.option("--blacklist", default="",
              help="Comma-separated list of base names/extensions/paths to ignore")
@click.option("--whitelist", default="",
              help="Comma-separated list of base names/extensions/paths to include (overrides blacklist)")
@click.option("--mode", type=click.Choice(MODES), default=None,
              help="denylist: scan everything not ignored; allowlist: only known source/config files")
@click.option("--marker-style", type=click.Choice(MARKER_STYLES), default=None,
              help="anywhere: TODO[tag]: on any line; comment: only after a // or # leader")
@click.option("--tracker", "tracker_path", default=None, type=click.Path(dir_okay=False),
              help="Tracker JSON file (default todo_tracker.json)")
@click.option("--on-corrupt-store", type=click.Choice(CORRUPT_POLICIES), default=None,
              help="What to do with an unreadable tracker: start empty (reset) or abort (fail)")
@click.option("--skip-unreadable/--no-skip-unreadable", default=False, show_default=True,
              help="Log and skip files that cannot be read instead of aborting")
@click.option("--date", "run_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="First-seen date for new todos (default: today)")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Logging verbosity on stderr")
def cli(root: str, blacklist: str, whitelist: str, mode: Optional[str], marker_style: Optional[str],
        tracker_path: Optional[str], on_corrupt_store: Optional[str], skip_unreadable: bool,
        run_date: Optional[datetime], log_level: Optional[str]) -> None:
    """Scan ROOT for TODO[tag]: markers, track first-seen dates, print a Markdown summary."""
    settings = load_settings()
    _configure_logging((log_level or settings.log_level).upper())

    policy = InclusionPolicy.build(
        blacklist=parse_token_list(blacklist),
        whitelist=parse_token_list(whitelist),
        mode=mode or settings.mode,
    )
    pattern = marker_pattern(marker_style or settings.marker_style)
    tracker_path = tracker_path or settings.tracker_path
    now = today(run_date.date() if run_date else None)

    try:
        result = scan_todos(root, policy, pattern, skip_unreadable=skip_unreadable)
    except ScanError as exc:
        _fail("Error scanning todos", exc)

    try:
        tracker = Storage.load_tracker(tracker_path, on_corrupt=on_corrupt_store or settings.on_corrupt)
    except StoreError as exc:
        _fail("Error loading tracker", exc)

    updated = update_todos(tracker.todos, result.todos, now)
    try:
        Storage.save_tracker(tracker_path, TodoTracker(todos=updated))
    except StoreError as exc:
        _fail("Error saving tracker", exc)

    logger.info("Tracked %d todos in %s", len(updated), tracker_path)
    click.echo(render_report(result, updated, policy.max_file_size), nl=False)

