"""Reference synchronizer: propagate story fingerprints into aggregate documents"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import Optional

from storysync.core.discover import SKIP_DIRS, relative_key, scan_dir
from storysync.core.models import ChangeSet, FileError, Mismatch, Reference, SyncReport
from storysync.core.utils.files import read_text, write_text


logger = logging.getLogger(__name__)

# - title: <text>
#   file: <path>
#   content-hash: <token>
REFERENCE_RE = re.compile(
    r'^[ \t]*-[ \t]+title:[ \t]*(?P<title>[^\r\n]*?)[ \t]*\r?\n'
    r'[ \t]*file:[ \t]*(?P<file>[^\r\n]*?)[ \t]*\r?\n'
    r'[ \t]*content-hash:[ \t]*(?P<hash>[^\s]+)',
    re.MULTILINE,
)

Edit = tuple[int, int, str]


def normalize_target(path: str) -> str:
    """Normalize a reference path so './a/b.md' and 'a/b.md' compare equal."""
    text = path.strip().replace('\\', '/')
    while text.startswith('./'):
        text = text[2:]
    return str(PurePosixPath(text)) if text else ''


def parse_references(text: str) -> list[Reference]:
    """Return every reference triple in text, in document order."""
    return [
        Reference(
            title=m.group('title'),
            target_path=m.group('file'),
            fingerprint=m.group('hash'),
            span=m.span('hash'),
        )
        for m in REFERENCE_RE.finditer(text)
    ]


def apply_edits(text: str, edits: Iterable[Edit]) -> str:
    """Apply (start, end, replacement) edits computed against the original text.

    Edits are applied from the highest offset down so earlier offsets stay
    valid. Overlapping edits raise ValueError.
    """
    bound = len(text)
    for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
        if end > bound or start > end:
            raise ValueError(f"overlapping or invalid edit at {start}:{end}")
        text = text[:start] + replacement + text[end:]
        bound = start
    return text


def sync_text(text: str, changes: ChangeSet, document: str = '') -> tuple[str, int, list[Mismatch]]:
    """Rewrite fingerprints of references to changed stories in text.

    Returns (new_text, refs_updated, mismatches). Only the fingerprint token
    of each affected reference is replaced.
    """
    edits: list[Edit] = []
    mismatches: list[Mismatch] = []
    for ref in parse_references(text):
        entry = changes.get(normalize_target(ref.target_path))
        if entry is None or not entry.changed:
            continue
        if ref.fingerprint != entry.old_fingerprint:
            logger.warning(
                "Reference to %s in %s has hash %s, expected %s",
                entry.path, document or '<text>', ref.fingerprint, entry.old_fingerprint or '-',
            )
            mismatches.append(Mismatch(
                document=document,
                target_path=entry.path,
                found_fingerprint=ref.fingerprint,
                expected_old_fingerprint=entry.old_fingerprint,
            ))
        start, end = ref.span
        edits.append((start, end, entry.new_fingerprint))
        logger.debug(
            "Updating reference hash for %s: %s -> %s",
            entry.path, ref.fingerprint, entry.new_fingerprint,
        )
    return apply_edits(text, edits), len(edits), mismatches


def rewrite_one(path: Path, changes: ChangeSet, document: str = '') -> tuple[bool, int, list[Mismatch]]:
    """Rewrite references in one aggregate document; write only if something changed."""
    path = Path(path)
    original = read_text(path)
    updated, count, mismatches = sync_text(original, changes, document or path.as_posix())
    if count:
        write_text(path, updated)
    return bool(count), count, mismatches


def rewrite_all(
    root_dir: Path,
    changes: ChangeSet,
    pattern: str = '*.blueprint.md',
    skip: Iterable[str] = SKIP_DIRS,
    base_dir: Optional[Path] = None,
    ) -> SyncReport:
    """Rewrite references in every aggregate document under root_dir.

    Returns an empty report without scanning when no entry in changes is
    marked changed. Report paths are relative to base_dir (default root_dir).
    """
    changed = {path: entry for path, entry in changes.items() if entry.changed}
    report = SyncReport()
    if not changed:
        logger.debug("No content changes detected, skipping reference updates")
        return report

    base = Path(base_dir) if base_dir is not None else Path(root_dir)
    for path in scan_dir(root_dir, skip, pattern):
        key = relative_key(path, base)
        try:
            written, count, mismatches = rewrite_one(path, changed, key)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to update references in %s: %s", key, e)
            report.errors.append(FileError(path=key, message=str(e)))
            continue
        report.refs_updated += count
        report.mismatches.extend(mismatches)
        (report.written if written else report.untouched).append(key)

    logger.debug(
        "Reference sync complete: written=%d untouched=%d refs=%d mismatches=%d",
        len(report.written), len(report.untouched), report.refs_updated, len(report.mismatches),
    )
    return report
