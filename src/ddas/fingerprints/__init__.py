"""Fingerprint layer: content, schema and statistical digests for datasets."""

from .schema import Fingerprint, FingerprintError, HashParams
from .generator import (
    DatasetFingerprinter,
    bloom_filter,
    bloom_might_contain,
    canonical_bytes,
    chunk_hashes,
    column_statistics,
    content_hash,
    merkle_root,
    schema_hash,
    statistical_hash,
)

__all__ = [
    "Fingerprint",
    "FingerprintError",
    "HashParams",
    "DatasetFingerprinter",
    "bloom_filter",
    "bloom_might_contain",
    "canonical_bytes",
    "chunk_hashes",
    "column_statistics",
    "content_hash",
    "merkle_root",
    "schema_hash",
    "statistical_hash",
]
