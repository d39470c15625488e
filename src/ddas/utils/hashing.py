"""Hashing utilities.

Every digest in DDAS is SHA-256, rendered as lowercase hex.

Why SHA-256:
- deterministic across machines
- stable for exact-duplicate keys and provenance
- collision resistance makes hash equality a safe "same bytes" signal
"""

import hashlib


def sha256_hex(data) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()
