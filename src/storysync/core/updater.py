"""Story corpus updater: refresh metadata blocks and collect fingerprint changes"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from storysync.core.discover import SKIP_DIRS, relative_key, scan_dir
from storysync.core.metadata import current_block, extract, render, without_metadata
from storysync.core.models import ChangeEntry, FileError, Metadata, UpdateReport
from storysync.core.utils.files import read_text, write_text
from storysync.core.utils.hashing import fingerprint


logger = logging.getLogger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return (now or datetime.now(timezone.utc)).replace(microsecond=0)


def _mtime(path: Path) -> datetime:
    """Return the file's modification time in UTC, whole seconds."""
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).replace(microsecond=0)


def update_one(
    path: Path,
    root: Path,
    existing: Metadata,
    raw: str,
    now: Optional[datetime] = None,
    ) -> tuple[bool, ChangeEntry]:
    """Regenerate the metadata block of one story; write only if the block text differs.

    Returns (did_write, entry). The entry is returned even when nothing was
    written; a first-time insertion or a path correction writes with
    entry.changed False.
    """
    path = Path(path)
    key = relative_key(path, root)
    body = without_metadata(raw)
    entry = ChangeEntry(
        path=key,
        old_fingerprint=existing.content_fingerprint or '',
        new_fingerprint=fingerprint(body),
    )

    created = existing.created_at or _mtime(path)
    if existing.last_updated and not entry.changed:
        updated = existing.last_updated
    else:
        updated = _now(now)
        logger.debug(
            "Updating last_updated for %s (old=%s new=%s)",
            key, entry.old_fingerprint or '-', entry.new_fingerprint,
        )

    block = render(
        Metadata(origin_path=key, created_at=created, last_updated=updated),
        entry.new_fingerprint,
    )
    if block == current_block(raw):
        logger.debug("No metadata changes needed for %s", key)
        return False, entry

    if existing.extra:
        logger.warning(
            "Dropping unrecognized metadata keys from %s: %s",
            key, ', '.join(sorted(existing.extra)),
        )
    write_text(path, block + body)
    logger.debug("Wrote metadata for %s (content_changed=%s)", key, entry.changed)
    return True, entry


def update_file(path: Path, root: Path, now: Optional[datetime] = None) -> tuple[bool, ChangeEntry]:
    """Read a story from disk and update its metadata block."""
    raw = read_text(Path(path))
    existing, _ = extract(raw)
    return update_one(path, root, existing, raw, now)


def update_all(
    root_dir: Path,
    base_dir: Path,
    skip: Iterable[str] = SKIP_DIRS,
    pattern: str = '*.md',
    now: Optional[datetime] = None,
    ) -> UpdateReport:
    """Update every story under root_dir; paths in the report are relative to base_dir.

    A per-document failure is recorded in report.errors and the batch
    continues. Raises NotFoundError only if root_dir is missing.
    """
    files = scan_dir(root_dir, skip, pattern)
    report = UpdateReport()
    if not files:
        logger.warning("No story documents found in %s", root_dir)
        return report

    for path in files:
        key = relative_key(path, base_dir)
        try:
            written, entry = update_file(path, base_dir, now)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to update metadata for %s: %s", key, e)
            report.errors.append(FileError(path=key, message=str(e)))
            continue
        report.changes[key] = entry
        (report.written if written else report.untouched).append(key)

    if report.errors:
        logger.warning("%d story document(s) could not be updated", len(report.errors))
    logger.debug(
        "Metadata update complete: total=%d written=%d untouched=%d errors=%d",
        len(files), len(report.written), len(report.untouched), len(report.errors),
    )
    return report
