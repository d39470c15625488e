"""Dataset fingerprint generation.

Three canonical digests are always produced:
- content hash: exact bytes (basis of the exact-duplicate shortcut)
- schema hash: column name:type pairs, independent of column order
- statistical hash: per-column summary statistics (approximate matching)

Two optional structures are produced when enabled in HashParams:
- Merkle root over fixed-size content chunks (hierarchical verification)
- Bloom filter over rows/lines (approximate membership for consumers)

All functions here are pure: no shared state, no I/O.
"""

from __future__ import annotations
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..utils.fingerprint import canonical_json
from ..utils.hashing import sha256_hex
from .schema import Fingerprint, FingerprintError, HashParams

SCHEMA_DELIMITER = "|"


def canonical_bytes(content: Any) -> bytes:
    """Exact byte representation used for content hashing and size."""
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    if isinstance(content, str):
        return content.encode("utf-8")
    return canonical_json(content).encode("utf-8")


def content_hash(content: Any) -> str:
    return sha256_hex(canonical_bytes(content))


def schema_hash(schema: Mapping[str, str]) -> str:
    joined = SCHEMA_DELIMITER.join(f"{name}:{typ}" for name, typ in sorted(schema.items()))
    return sha256_hex(joined)


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def column_statistics(rows: List[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Summary statistics per column.

    Numeric columns (at least one numeric value) report mean/min/max/count over
    the numeric values only; every other column reports unique count, most
    common value and count over non-null values. Columns with no non-null
    values are left out.
    """
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            columns.setdefault(key, None)

    stats: Dict[str, Dict[str, Any]] = {}
    for column in columns:
        values = [row.get(column) for row in rows if row.get(column) is not None]
        if not values:
            continue
        numeric = [v for v in values if _is_numeric(v)]
        if numeric:
            stats[column] = {
                "type": "numeric",
                "mean": sum(numeric) / len(numeric),
                "min": min(numeric),
                "max": max(numeric),
                "count": len(numeric),
            }
        else:
            as_text = [v if isinstance(v, str) else canonical_json(v) for v in values]
            stats[column] = {
                "type": "categorical",
                "unique_count": len(set(as_text)),
                "most_common": Counter(as_text).most_common(1)[0][0],
                "count": len(values),
            }
    return stats


def statistical_hash(rows: Optional[List[Mapping[str, Any]]]) -> str:
    if not rows:
        return ""
    return sha256_hex(canonical_json(column_statistics(rows)))


def merkle_root(chunks: List[str]) -> str:
    if not chunks:
        return ""
    if len(chunks) == 1:
        return chunks[0]
    next_level = []
    for i in range(0, len(chunks), 2):
        left = chunks[i]
        right = chunks[i + 1] if i + 1 < len(chunks) else left
        next_level.append(sha256_hex(left + right))
    return merkle_root(next_level)


def chunk_hashes(content: Any, chunk_size: int = 1024) -> List[str]:
    """SHA-256 of each fixed-size slice of the canonical content bytes."""
    data = canonical_bytes(content)
    return [sha256_hex(data[i:i + chunk_size]) for i in range(0, len(data), chunk_size)]


def _bloom_indexes(item: str, size: int, hash_count: int) -> Iterable[int]:
    for i in range(hash_count):
        digest = sha256_hex(f"{item}{i}")
        yield int(digest[:8], 16) % size


def bloom_filter(items: Iterable[str], size: int = 1000, hash_count: int = 3) -> str:
    bits = [0] * size
    for item in items:
        for idx in _bloom_indexes(item, size, hash_count):
            bits[idx] = 1
    return "".join(str(b) for b in bits)


def bloom_might_contain(bits: str, item: str, hash_count: int = 3) -> bool:
    """False means definitely absent; True means possibly present."""
    if not bits:
        return False
    return all(bits[idx] == "1" for idx in _bloom_indexes(item, len(bits), hash_count))


def rows_of(content: Any) -> List[Mapping[str, Any]]:
    """Tabular view of content: a list of row mappings, or [] for raw text/bytes."""
    if isinstance(content, list) and all(isinstance(r, Mapping) for r in content):
        return content
    return []


def bloom_items(content: Any) -> List[str]:
    """Rows as canonical JSON, or non-empty lines for raw text/bytes."""
    rows = rows_of(content)
    if rows:
        return [canonical_json(r) for r in rows]
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode("utf-8", errors="replace")
    if isinstance(content, str):
        return [line for line in content.splitlines() if line.strip()]
    return [canonical_json(content)]


def validate_schema(schema: Any) -> Dict[str, str]:
    if schema is None:
        raise FingerprintError("schema is required to fingerprint a dataset")
    if not isinstance(schema, Mapping):
        raise FingerprintError(f"schema must be a mapping of column -> type, got {type(schema).__name__}")
    for name, typ in schema.items():
        if not isinstance(name, str) or not isinstance(typ, str):
            raise FingerprintError(f"schema entry {name!r}: {typ!r} is not a string pair")
    return dict(schema)


class DatasetFingerprinter:
    """Builds a complete Fingerprint from raw content and a column type map."""

    def __init__(self, params: Optional[HashParams] = None):
        self.params = params or HashParams()

    def fingerprint(self, content: Any, schema: Any) -> Fingerprint:
        if content is None:
            raise FingerprintError("content is required to fingerprint a dataset")
        schema = validate_schema(schema)
        p = self.params

        root = None
        if p.merkle_enabled:
            root = merkle_root(chunk_hashes(content, p.chunk_size))
        bloom = None
        if p.bloom_enabled:
            bloom = bloom_filter(bloom_items(content), p.bloom_size, p.bloom_hash_count)

        return Fingerprint(
            content_hash=content_hash(content),
            schema_hash=schema_hash(schema),
            statistical_hash=statistical_hash(rows_of(content)),
            merkle_root=root,
            bloom_filter=bloom,
            fingerprint_version=p.fingerprint_version,
        )
