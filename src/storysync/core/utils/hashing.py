"""SHA-256 content fingerprints for story bodies"""

import hashlib


def fingerprint(body: str) -> str:
    """Return hex-encoded SHA-256 of body (64 lower-case chars)."""
    return hashlib.sha256(body.encode("utf-8")).hexdigest()
