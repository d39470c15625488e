"""Duplication detection: registry, comparison cascade, alert log."""

from .schema import DatasetAlreadyRegistered, DuplicationAlert
from .metrics import DetectionMetrics
from .detector import DuplicationDetector, generate_recommendation

__all__ = [
    "DatasetAlreadyRegistered",
    "DuplicationAlert",
    "DetectionMetrics",
    "DuplicationDetector",
    "generate_recommendation",
]
