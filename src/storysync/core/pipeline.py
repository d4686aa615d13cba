"""Two-phase sync pipeline: story metadata update, then reference propagation"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from storysync.config import Settings
from storysync.core.models import SyncReport, UpdateReport
from storysync.core.references import rewrite_all
from storysync.core.updater import update_all


logger = logging.getLogger(__name__)


def run_update(settings: Settings, base_dir: Path, now: Optional[datetime] = None) -> UpdateReport:
    """Phase 1: refresh metadata of every story document."""
    base_dir = Path(base_dir)
    return update_all(
        base_dir / settings.stories_dir, base_dir,
        skip=settings.skip_dirs, pattern=settings.story_pattern, now=now,
    )


def run_references(settings: Settings, base_dir: Path, update: UpdateReport) -> SyncReport:
    """Phase 2: propagate the change set of a completed phase 1 into aggregates."""
    base_dir = Path(base_dir)
    return rewrite_all(
        base_dir / settings.aggregates_dir, update.changes,
        pattern=settings.aggregate_pattern, skip=settings.skip_dirs, base_dir=base_dir,
    )


def run_sync(
    settings: Settings,
    base_dir: Path,
    skip_references: bool = False,
    now: Optional[datetime] = None,
    ) -> tuple[UpdateReport, Optional[SyncReport]]:
    """Run phase 1 to completion, then phase 2 unless skipped.

    Returns (update_report, sync_report); sync_report is None when
    skip_references is set.
    """
    update = run_update(settings, base_dir, now)
    if skip_references:
        logger.info("Skipping reference updates")
        return update, None
    return update, run_references(settings, base_dir, update)
