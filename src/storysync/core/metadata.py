"""Metadata block codec: parse, strip, and render the story metadata header"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from storysync.core.errors import MalformedMetadata
from storysync.core.models import Metadata


logger = logging.getLogger(__name__)

# Opening fence must be the first bytes of the document; one blank line after
# the closing fence belongs to the block.
METADATA_RE = re.compile(
    r'\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)(?:[ \t]*\r?\n)?',
    re.DOTALL,
)
KEY_VALUE_RE = re.compile(r'^([^:\r\n]+):[ \t]*(.*?)[ \t]*\r?$', re.MULTILINE)

FIELD_KEYS = {
    'file_path':     'origin_path',
    'created_at':    'created_at',
    'last_updated':  'last_updated',
    '_content_hash': 'content_fingerprint',
}
TIMESTAMP_FIELDS = {'created_at', 'last_updated'}


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text[-1:] in ('Z', 'z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedMetadata(f"invalid timestamp {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format as RFC 3339 with whole seconds, using 'Z' for UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith('+00:00'):
        text = text[:-6] + 'Z'
    return text


def _raw_pairs(block: str) -> dict[str, str]:
    """Return non-empty key/value pairs from the inside of a metadata block."""
    pairs = {}
    for m in KEY_VALUE_RE.finditer(block):
        key, value = m.group(1).strip(), m.group(2).strip()
        if key and value:
            pairs[key] = value
    return pairs


def _match_block(raw: str) -> Optional[re.Match]:
    """Match a leading fenced block only if every non-blank line in it is key: value."""
    m = METADATA_RE.match(raw)
    if m is None:
        return None
    for line in (m.group(1) or '').splitlines():
        if line.strip() and not KEY_VALUE_RE.fullmatch(line):
            return None
    return m


def current_block(raw: str) -> Optional[str]:
    """Return the exact leading metadata block text, or None if absent."""
    m = _match_block(raw)
    return m.group(0) if m else None


def without_metadata(raw: str) -> str:
    """Return the document body with the leading metadata block removed."""
    m = _match_block(raw)
    return raw[m.end():] if m else raw


def extract(raw: str) -> tuple[Metadata, str]:
    """Return (metadata, body). Absent or malformed fields are left unset."""
    m = _match_block(raw)
    if not m:
        return Metadata(), raw

    fields: dict = {}
    extra: dict[str, str] = {}
    for key, value in _raw_pairs(m.group(1) or '').items():
        name = FIELD_KEYS.get(key)
        if name is None:
            extra[key] = value
        elif name in TIMESTAMP_FIELDS:
            try:
                fields[name] = parse_timestamp(value)
            except MalformedMetadata as e:
                logger.debug("Ignoring %s: %s", key, e)
        else:
            fields[name] = value
    return Metadata(**fields, extra=extra), raw[m.end():]


def read_metadata(raw: str) -> Metadata:
    """Return only the metadata of a document's raw text."""
    return extract(raw)[0]


def render(metadata: Metadata, fingerprint: str) -> str:
    """Serialize a canonical metadata block, including the trailing blank line.

    Field order and timestamp format are fixed, so equal inputs always render
    byte-identical blocks.
    """
    created = format_timestamp(metadata.created_at) if metadata.created_at else ''
    updated = format_timestamp(metadata.last_updated) if metadata.last_updated else ''
    return (
        "---\n"
        f"file_path: {metadata.origin_path or ''}\n"
        f"created_at: {created}\n"
        f"last_updated: {updated}\n"
        f"_content_hash: {fingerprint}\n"
        "---\n\n"
    )
