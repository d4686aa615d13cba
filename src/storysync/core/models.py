"""Data models shared by the metadata updater and the reference synchronizer"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Metadata(BaseModel):
    """Parsed metadata block of a story document. None means unset."""
    origin_path: Optional[str] = None
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    content_fingerprint: Optional[str] = None
    extra: dict[str, str] = {}      # unrecognized keys; never re-rendered


@dataclass(frozen=True)
class ChangeEntry:
    """Fingerprint transition of one story document during an update run."""
    path:            str
    old_fingerprint: str            # "" when the document had no stored fingerprint
    new_fingerprint: str

    @property
    def changed(self) -> bool:
        return self.old_fingerprint != self.new_fingerprint


ChangeSet = dict[str, ChangeEntry]


@dataclass(frozen=True)
class Reference:
    """A (title, file, content-hash) triple embedded in an aggregate document."""
    title:       str
    target_path: str
    fingerprint: str
    span:        tuple[int, int]    # offsets of the fingerprint token in the source text


@dataclass(frozen=True)
class Mismatch:
    """A reference whose stored fingerprint disagreed with the recorded old one."""
    document:                 str
    target_path:              str
    found_fingerprint:        str
    expected_old_fingerprint: str


@dataclass(frozen=True)
class FileError:
    """A per-document read/write failure recorded by a batch run."""
    path:    str
    message: str


@dataclass
class UpdateReport:
    """Result of a metadata update run over the story corpus."""
    written:   list[str] = field(default_factory=list)
    untouched: list[str] = field(default_factory=list)
    changes:   ChangeSet = field(default_factory=dict)
    errors:    list[FileError] = field(default_factory=list)

    def changed(self) -> ChangeSet:
        """Return only the entries whose content fingerprint moved."""
        return {path: entry for path, entry in self.changes.items() if entry.changed}


@dataclass
class SyncReport:
    """Result of a reference synchronization run over the aggregate corpus."""
    written:      list[str] = field(default_factory=list)
    untouched:    list[str] = field(default_factory=list)
    refs_updated: int = 0
    mismatches:   list[Mismatch] = field(default_factory=list)
    errors:       list[FileError] = field(default_factory=list)
