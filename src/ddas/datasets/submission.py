"""Dataset submissions: raw payload -> fingerprinted Dataset.

A submission is what callers hand us:
    {
      "name": "...", "source": "https://...", "format": "json",
      "content": [ {...row...}, ... ]  |  "raw text"  |  b"raw bytes",
      "metadata": {"title": ..., "description": ..., "data_types": {...}, ...}
    }

Fingerprinting happens before a Dataset object exists, so a malformed
submission fails here and never reaches the detector's registry.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional
import uuid

from ..fingerprints.generator import DatasetFingerprinter, canonical_bytes, rows_of
from ..fingerprints.schema import FingerprintError
from .schema import Dataset, DatasetMetadata, ProvenanceInfo, QualityMetrics

# Quality scores assumed when a submission carries none.
DEFAULT_QUALITY = QualityMetrics(
    completeness=0.95,
    consistency=0.9,
    accuracy=0.85,
    freshness=1.0,
    validity=0.92,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def infer_schema(rows: List[Mapping[str, Any]]) -> Dict[str, str]:
    """Column -> type from the first non-null value seen in each column."""
    schema: Dict[str, str] = {}
    for row in rows:
        for key, value in row.items():
            if schema.get(key, "null") == "null":
                schema[key] = _json_type(value)
    return schema


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise FingerprintError(f"invalid timestamp: {value!r}")


@dataclass
class DatasetSubmission:
    name: str
    content: Any
    source: str = ""
    format: str = "json"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DatasetSubmission:
        if not isinstance(payload, Mapping):
            raise FingerprintError(f"submission must be an object, got {type(payload).__name__}")
        name = payload.get("name")
        if not name:
            raise FingerprintError("submission is missing 'name'")
        if payload.get("content") is None:
            raise FingerprintError(f"submission {name!r} is missing 'content'")
        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise FingerprintError(f"submission {name!r}: 'metadata' must be an object")
        return cls(
            name=str(name),
            content=payload["content"],
            source=str(payload.get("source") or ""),
            format=str(payload.get("format") or "json"),
            metadata=dict(metadata),
        )

    def resolve_schema(self) -> Dict[str, str]:
        declared = self.metadata.get("data_types")
        if declared is not None:
            return declared
        rows = rows_of(self.content)
        if not rows:
            raise FingerprintError(
                f"submission {self.name!r} declares no data_types and its content is not tabular"
            )
        return infer_schema(rows)


def _mapping(value: Any, what: str, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise FingerprintError(f"submission {name!r}: {what} must be an object, got {type(value).__name__}")
    return value


def _build_metadata(
    submission: DatasetSubmission,
    schema: Dict[str, str],
    rows: List[Mapping[str, Any]],
    default_quality: QualityMetrics,
    now: datetime,
) -> DatasetMetadata:
    meta = submission.metadata
    prov = _mapping(meta.get("provenance"), "metadata.provenance", submission.name)
    quality = _mapping(prov.get("quality"), "metadata.provenance.quality", submission.name)

    provenance = ProvenanceInfo(
        source_url=str(prov.get("source_url") or submission.source),
        downloaded_at=_parse_datetime(prov.get("downloaded_at")) or now,
        transformations=list(prov.get("transformations") or []),
        lineage=list(prov.get("lineage") or []),
        quality=QualityMetrics.from_dict(quality, default=default_quality),
    )
    return DatasetMetadata(
        title=str(meta.get("title") or ""),
        description=str(meta.get("description") or ""),
        author=str(meta.get("author") or ""),
        organization=str(meta.get("organization") or ""),
        version=str(meta.get("version") or ""),
        license=str(meta.get("license") or ""),
        doi=meta.get("doi"),
        tags=[str(t) for t in (meta.get("tags") or [])],
        column_count=int(meta.get("column_count", len(schema))),
        row_count=int(meta.get("row_count", len(rows))),
        data_types=dict(schema),
        provenance=provenance,
    )


def build_dataset(
    submission: DatasetSubmission,
    fingerprinter: DatasetFingerprinter,
    default_quality: QualityMetrics = DEFAULT_QUALITY,
    clock: Callable[[], datetime] = utcnow,
) -> Dataset:
    """Fingerprint a submission and wrap it in an immutable Dataset.

    Every malformed field surfaces as FingerprintError, so callers can reject
    one submission and carry on with the next.
    """
    schema = submission.resolve_schema()
    fingerprint = fingerprinter.fingerprint(submission.content, schema)

    now = clock()
    rows = rows_of(submission.content)
    try:
        metadata = _build_metadata(submission, schema, rows, default_quality, now)
    except FingerprintError:
        raise
    except (TypeError, ValueError) as e:
        raise FingerprintError(f"submission {submission.name!r} has invalid metadata: {e}") from e

    return Dataset(
        id=f"dataset_{uuid.uuid4().hex}",
        name=submission.name,
        source=submission.source,
        size=len(canonical_bytes(submission.content)),
        format=submission.format,
        created_at=now,
        modified_at=now,
        fingerprint=fingerprint,
        metadata=metadata,
    )
