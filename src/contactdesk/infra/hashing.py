"""Hashing helpers for logging client identities.

Client identities are IP addresses; logs carry a short, non-reversible
fingerprint instead so that repeated abuse from one source is still
traceable across log lines.
"""

import hashlib
import os


def fingerprint(value: str) -> str:
    """Return the first 12 hex chars of sha256(salt + value).

    The optional salt comes from LOG_FINGERPRINT_SALT.
    """
    salt = os.environ.get("LOG_FINGERPRINT_SALT", "")
    return hashlib.sha256(f"{salt}{value}".encode()).hexdigest()[:12]
