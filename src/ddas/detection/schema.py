"""Duplication alert record.

An alert is written once per (original, duplicate) pair that clears the
lowest threshold and is never mutated. Retention pruning is the only way an
alert leaves the log.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from ..datasets.schema import Dataset
from ..similarity.metrics import DuplicationType, SimilarityMetrics


class DatasetAlreadyRegistered(ValueError):
    """A dataset id was submitted to the registry twice."""


@dataclass(frozen=True)
class DuplicationAlert:
    id: str
    type: DuplicationType  # never NONE
    confidence: float
    original_dataset: Dataset  # already registered
    duplicate_dataset: Dataset  # newly submitted
    similarities: SimilarityMetrics
    recommendation: str
    created_at: datetime

    def involves(self, dataset_id: str) -> bool:
        return self.original_dataset.id == dataset_id or self.duplicate_dataset.id == dataset_id

    def to_event(self) -> Dict[str, Any]:
        """Flat event handed to alert distribution (dataset ids, not datasets)."""
        return {
            "id": self.id,
            "type": self.type.value,
            "confidence": self.confidence,
            "original_dataset_id": self.original_dataset.id,
            "duplicate_dataset_id": self.duplicate_dataset.id,
            "similarities": self.similarities.to_dict(),
            "recommendation": self.recommendation,
            "created_at": self.created_at.isoformat(),
        }
