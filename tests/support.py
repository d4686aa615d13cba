"""Shared test data: fixed timestamps, a canonical story, and a blueprint builder"""

from datetime import datetime, timezone


STORIES = "docs/user-stories"
BLUEPRINTS = "docs/changes-request"

# 2023-01-01T12:00:00Z
MTIME = 1672574400
NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)

STORY_WITH_METADATA = """\
---
file_path: docs/user-stories/story1.md
created_at: 2023-01-01T12:00:00Z
last_updated: 2023-01-02T12:00:00Z
_content_hash: old-hash-1
---

# Story 1"""


def blueprint(*refs: tuple[str, str, str]) -> str:
    """Build a blueprint document embedding (title, file, hash) references."""
    lines = ["---", "name: Change Request", "created-at: 2023-01-05T12:00:00Z", "user-stories:"]
    for title, file, content_hash in refs:
        lines += [f"  - title: {title}", f"    file: {file}", f"    content-hash: {content_hash}"]
    lines += ["---", "", "# Blueprint", "", "Body text.", ""]
    return "\n".join(lines)
