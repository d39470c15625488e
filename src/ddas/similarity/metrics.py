"""Pairwise similarity between fingerprinted datasets.

Four independent signals, each in [0, 1]:
- jaccard: overlap of column names
- cosine: angle between numeric feature vectors (size, shape, quality)
- structural: column names plus declared types
- semantic: token overlap of title + description

Confidence is their unweighted mean.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from ..datasets.schema import Dataset
from ..utils.text import whitespace_tokens


class DuplicationType(str, Enum):
    EXACT = "exact"
    SIMILAR = "similar"
    POTENTIAL = "potential"
    NONE = "none"


@dataclass(frozen=True)
class SimilarityMetrics:
    jaccard: float
    cosine: float
    structural: float
    semantic: float

    @property
    def confidence(self) -> float:
        return (self.jaccard + self.cosine + self.structural + self.semantic) / 4

    def to_dict(self) -> Dict[str, float]:
        return {
            "jaccard": self.jaccard,
            "cosine": self.cosine,
            "structural": self.structural,
            "semantic": self.semantic,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Thresholds:
    """Inclusive lower bounds for each duplication tier."""
    exact: float = 0.95
    similar: float = 0.80
    potential: float = 0.60

    def __post_init__(self):
        if not (0.0 <= self.potential <= self.similar <= self.exact <= 1.0):
            raise ValueError(
                "thresholds must satisfy 0 <= potential <= similar <= exact <= 1, "
                f"got exact={self.exact} similar={self.similar} potential={self.potential}"
            )

    @classmethod
    def from_dict(cls, d: Optional[Mapping[str, Any]]) -> Thresholds:
        d = d or {}
        return cls(
            exact=float(d.get("exact", 0.95)),
            similar=float(d.get("similar", 0.80)),
            potential=float(d.get("potential", 0.60)),
        )


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    a, b = set(a), set(b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # rounding can push parallel vectors just past 1.0
    return min(1.0, max(0.0, float(np.dot(va, vb) / (norm_a * norm_b))))


def structural(schema_a: Mapping[str, str], schema_b: Mapping[str, str]) -> float:
    keys_a, keys_b = set(schema_a), set(schema_b)
    all_keys = keys_a | keys_b
    if not all_keys:
        return 1.0
    common = keys_a & keys_b
    keys_similarity = len(common) / len(all_keys)
    if not common:
        types_similarity = 0.0
    else:
        type_matches = sum(1 for k in common if schema_a[k] == schema_b[k])
        types_similarity = type_matches / len(common)
    return (keys_similarity + types_similarity) / 2


def _descriptive_text(dataset: Dataset) -> str:
    return f"{dataset.metadata.title} {dataset.metadata.description}"


def semantic(a: Dataset, b: Dataset) -> float:
    """Token Jaccard of title + description; two untitled datasets match fully."""
    tokens_a = whitespace_tokens(_descriptive_text(a))
    tokens_b = whitespace_tokens(_descriptive_text(b))
    if not tokens_a and not tokens_b:
        return 1.0
    return jaccard(tokens_a, tokens_b)


def feature_vector(dataset: Dataset) -> List[float]:
    meta = dataset.metadata
    return [
        float(dataset.size),
        float(meta.column_count),
        float(meta.row_count),
        *meta.provenance.quality.as_list(),
    ]


def calculate_similarity(a: Dataset, b: Dataset) -> SimilarityMetrics:
    types_a = a.metadata.data_types
    types_b = b.metadata.data_types
    return SimilarityMetrics(
        jaccard=jaccard(types_a.keys(), types_b.keys()),
        cosine=cosine(feature_vector(a), feature_vector(b)),
        structural=structural(types_a, types_b),
        semantic=semantic(a, b),
    )


def classify(confidence: float, thresholds: Optional[Thresholds] = None) -> DuplicationType:
    t = thresholds or Thresholds()
    if confidence >= t.exact:
        return DuplicationType.EXACT
    if confidence >= t.similar:
        return DuplicationType.SIMILAR
    if confidence >= t.potential:
        return DuplicationType.POTENTIAL
    return DuplicationType.NONE
