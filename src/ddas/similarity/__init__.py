from .metrics import (
    DuplicationType,
    SimilarityMetrics,
    Thresholds,
    calculate_similarity,
    classify,
    cosine,
    feature_vector,
    jaccard,
    semantic,
    structural,
)

__all__ = [
    "DuplicationType",
    "SimilarityMetrics",
    "Thresholds",
    "calculate_similarity",
    "classify",
    "cosine",
    "feature_vector",
    "jaccard",
    "semantic",
    "structural",
]
