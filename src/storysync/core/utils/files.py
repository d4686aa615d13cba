"""Whole-file document I/O without newline translation"""

from pathlib import Path


def read_text(path: Path) -> str:
    """Read a document as UTF-8, keeping its line endings as stored."""
    return Path(path).read_bytes().decode('utf-8')


def write_text(path: Path, text: str) -> None:
    """Overwrite a document with text encoded as UTF-8."""
    Path(path).write_bytes(text.encode('utf-8'))
