"""Document discovery: recursive directory scan with pruned directories"""

import fnmatch
import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from storysync.core.errors import NotFoundError


logger = logging.getLogger(__name__)

SKIP_DIRS = (
    'node_modules', '.git', 'dist', 'build', 'vendor',
    'tmp', 'temp', '.cache', '.github',
)


def scan_dir(directory: Path, skip: Iterable[str] = SKIP_DIRS, pattern: str = '*.md') -> list[Path]:
    """Return sorted files under directory whose name matches pattern.

    Directories named in skip are pruned before descending. Raises
    NotFoundError if directory is not an existing directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotFoundError(directory)

    skipped = set(skip)
    pattern = pattern.lower()
    found = []

    def on_error(err: OSError) -> None:
        logger.warning("Error scanning subdirectory %s: %s", err.filename, err)

    for dirpath, dirnames, filenames in os.walk(directory, onerror=on_error):
        pruned = [d for d in dirnames if d in skipped]
        for d in pruned:
            logger.debug("Skipping directory %s", os.path.join(dirpath, d))
        dirnames[:] = sorted(d for d in dirnames if d not in skipped)
        for name in filenames:
            if fnmatch.fnmatchcase(name.lower(), pattern):
                found.append(Path(dirpath) / name)
    return sorted(found)


def relative_key(path: Path, base: Path) -> str:
    """Return path relative to base as a POSIX string, or path itself if outside base."""
    path, base = Path(path), Path(base)
    for p, b in ((path, base), (path.resolve(), base.resolve())):
        try:
            return p.relative_to(b).as_posix()
        except ValueError:
            continue
    return path.as_posix()


def group_by_dir(paths: Iterable[str]) -> dict[str, list[str]]:
    """Group relative POSIX paths by parent directory, both levels sorted."""
    groups: dict[str, list[str]] = {}
    for p in paths:
        pp = PurePosixPath(p)
        groups.setdefault(str(pp.parent), []).append(pp.name)
    return {d: sorted(names) for d, names in sorted(groups.items())}
