"""Dataset model and submission ingestion."""

from .schema import Dataset, DatasetMetadata, ProvenanceInfo, QualityMetrics
from .submission import DEFAULT_QUALITY, DatasetSubmission, build_dataset, infer_schema
from .local_jsonl import LocalJSONLSubmissions

__all__ = [
    "Dataset",
    "DatasetMetadata",
    "ProvenanceInfo",
    "QualityMetrics",
    "DEFAULT_QUALITY",
    "DatasetSubmission",
    "build_dataset",
    "infer_schema",
    "LocalJSONLSubmissions",
]
