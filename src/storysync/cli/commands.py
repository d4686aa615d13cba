"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError

from storysync.config import Settings, load_config
from storysync.core.discover import group_by_dir, relative_key, scan_dir
from storysync.core.errors import NotFoundError
from storysync.core.metadata import format_timestamp, read_metadata
from storysync.core.models import FileError, SyncReport, UpdateReport
from storysync.core.pipeline import run_references, run_update
from storysync.core.utils.files import read_text


RootOption = Annotated[Optional[Path], typer.Option("--root", help="Project root (default: current directory)")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Enable debug logging")]


def _setup_logging(debug: bool, level: str = "WARNING") -> None:
    logging.basicConfig(level=logging.DEBUG if debug else level, format="[%(levelname)s] %(message)s")


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(base_dir: Path, overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides, base_dir=base_dir)
    except (ValueError, ValidationError) as e:
        _fail("Invalid configuration", e)


def _echo_grouped(paths: list[str], indent: str = "") -> None:
    """Print paths grouped under their parent directory."""
    for directory, names in group_by_dir(paths).items():
        typer.echo(f"{indent}{directory}/")
        for name in names:
            typer.echo(f"{indent}  - {name}")


def _echo_errors(errors: list[FileError]) -> None:
    for err in errors:
        typer.echo(f"Warning: {err.path}: {err.message}", err=True)


def _echo_update(report: UpdateReport) -> None:
    if report.written:
        typer.echo("Updated metadata:")
        _echo_grouped(report.written, "  ")
    _echo_errors(report.errors)
    total = len(report.written) + len(report.untouched) + len(report.errors)
    typer.echo(
        f"Processed {total} story file(s) - "
        f"{len(report.written)} updated, "
        f"{len(report.untouched)} unchanged, "
        f"{len(report.changed())} with content changes"
    )


def _echo_sync(report: SyncReport) -> None:
    for path in report.written:
        typer.echo(f"  updated references: {path}")
    for m in report.mismatches:
        typer.echo(
            f"Warning: {m.document}: reference to {m.target_path} had hash "
            f"{m.found_fingerprint}, expected {m.expected_old_fingerprint or '(none)'}",
            err=True,
        )
    _echo_errors(report.errors)
    typer.echo(
        f"Reference sync complete - "
        f"{report.refs_updated} reference(s) updated in {len(report.written)} file(s), "
        f"{len(report.untouched)} unchanged"
    )


def sync_cmd(
    root: RootOption = None,
    skip_references: Annotated[bool, typer.Option("--skip-references", help="Do not update references in aggregate documents")] = False,
    debug: DebugOption = False,
    ):
    """Update story metadata, then propagate changed hashes into aggregate documents."""
    base_dir = root or Path.cwd()
    settings = _settings(base_dir)
    _setup_logging(debug, settings.log_level)

    try:
        update = run_update(settings, base_dir)
    except NotFoundError as e:
        _fail("Story directory missing", e)
    _echo_update(update)

    if skip_references:
        typer.echo("Skipped reference updates (--skip-references)")
        return
    if not update.changed():
        typer.echo("No content changes; references left as they are.")
        return

    try:
        report = run_references(settings, base_dir, update)
    except NotFoundError as e:
        _fail("Aggregate directory missing", e)
    _echo_sync(report)


def list_cmd(root: RootOption = None):
    """List story documents grouped by directory."""
    base_dir = root or Path.cwd()
    settings = _settings(base_dir)
    try:
        files = scan_dir(base_dir / settings.stories_dir, settings.skip_dirs, settings.story_pattern)
    except NotFoundError as e:
        _fail("Story directory missing", e)
    if not files:
        typer.echo("No story documents found.")
        raise typer.Exit(1)
    _echo_grouped([relative_key(f, base_dir) for f in files])


def show_cmd(path: Annotated[Path, typer.Argument(help="Story document to inspect")]):
    """Print the metadata block of a single document."""
    try:
        meta = read_metadata(read_text(path))
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)
    typer.echo(f"file_path:     {meta.origin_path or '-'}")
    typer.echo(f"created_at:    {format_timestamp(meta.created_at) if meta.created_at else '-'}")
    typer.echo(f"last_updated:  {format_timestamp(meta.last_updated) if meta.last_updated else '-'}")
    typer.echo(f"_content_hash: {meta.content_fingerprint or '-'}")
    for key, value in meta.extra.items():
        typer.echo(f"{key}: {value}")
