"""Fingerprint schema and parameter types.

A fingerprint answers: have we seen these exact bytes before? this exact
column layout? a dataset with the same statistical shape?
Versioning (fingerprint_version + HashParams) allows re-fingerprinting later
without ambiguity about which parameters produced a digest.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..similarity.metrics import SimilarityMetrics


class FingerprintError(ValueError):
    """Submission cannot be fingerprinted (missing or malformed content/schema)."""


@dataclass(frozen=True)
class HashParams:
    """Versioned fingerprint parameters."""
    fingerprint_version: str = "v1"
    merkle_enabled: bool = True
    chunk_size: int = 1024  # bytes per Merkle leaf
    bloom_enabled: bool = True
    bloom_size: int = 1000
    bloom_hash_count: int = 3

    @classmethod
    def from_dict(cls, cfg: Optional[Dict[str, Any]]) -> HashParams:
        cfg = cfg or {}
        merkle = cfg.get("merkle") or {}
        bloom = cfg.get("bloom") or {}
        params = cls(
            fingerprint_version=str(cfg.get("fingerprint_version", "v1")),
            merkle_enabled=bool(merkle.get("enabled", True)),
            chunk_size=int(merkle.get("chunk_size", 1024)),
            bloom_enabled=bool(bloom.get("enabled", True)),
            bloom_size=int(bloom.get("size", 1000)),
            bloom_hash_count=int(bloom.get("hash_count", 3)),
        )
        if params.chunk_size <= 0:
            raise ValueError(f"merkle.chunk_size must be positive, got {params.chunk_size}")
        if params.bloom_size <= 0 or params.bloom_hash_count <= 0:
            raise ValueError("bloom.size and bloom.hash_count must be positive")
        return params


@dataclass(frozen=True)
class Fingerprint:
    """Digests derived from a dataset's content and schema. Never mutated after creation."""
    content_hash: str
    schema_hash: str
    statistical_hash: str
    merkle_root: Optional[str] = None
    bloom_filter: Optional[str] = None
    fingerprint_version: str = "v1"
    # cache slot for a last-computed comparison; not canonical
    similarity: Optional["SimilarityMetrics"] = field(default=None, compare=False)

    def exact_key(self) -> tuple:
        """Key for the exact-duplicate shortcut: content and schema must both match."""
        return (self.content_hash, self.schema_hash)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content_hash": self.content_hash,
            "schema_hash": self.schema_hash,
            "statistical_hash": self.statistical_hash,
            "merkle_root": self.merkle_root,
            "bloom_filter": self.bloom_filter,
            "fingerprint_version": self.fingerprint_version,
            "similarity": self.similarity.to_dict() if self.similarity else None,
        }
