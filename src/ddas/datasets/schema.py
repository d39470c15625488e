"""Core dataset data model.

Dataset is the *fingerprinted* representation handed to the detector.
It is created once per submission and never mutated afterwards: the detector
compares datasets at insertion time only, so a changed fingerprint would
silently invalidate every alert already recorded against it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..fingerprints.schema import Fingerprint


@dataclass(frozen=True)
class QualityMetrics:
    completeness: float = 0.0
    consistency: float = 0.0
    accuracy: float = 0.0
    freshness: float = 0.0
    validity: float = 0.0

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]], default: Optional[QualityMetrics] = None) -> QualityMetrics:
        base = default or cls()
        d = d or {}
        return cls(
            completeness=float(d.get("completeness", base.completeness)),
            consistency=float(d.get("consistency", base.consistency)),
            accuracy=float(d.get("accuracy", base.accuracy)),
            freshness=float(d.get("freshness", base.freshness)),
            validity=float(d.get("validity", base.validity)),
        )

    def as_list(self) -> List[float]:
        return [self.completeness, self.consistency, self.accuracy, self.freshness, self.validity]

    def to_dict(self) -> Dict[str, float]:
        return {
            "completeness": self.completeness,
            "consistency": self.consistency,
            "accuracy": self.accuracy,
            "freshness": self.freshness,
            "validity": self.validity,
        }


@dataclass(frozen=True)
class ProvenanceInfo:
    source_url: str = ""
    downloaded_at: Optional[datetime] = None
    transformations: List[str] = field(default_factory=list)
    lineage: List[str] = field(default_factory=list)
    quality: QualityMetrics = field(default_factory=QualityMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "downloaded_at": self.downloaded_at.isoformat() if self.downloaded_at else None,
            "transformations": list(self.transformations),
            "lineage": list(self.lineage),
            "quality": self.quality.to_dict(),
        }


@dataclass(frozen=True)
class DatasetMetadata:
    title: str = ""
    description: str = ""
    author: str = ""
    organization: str = ""
    version: str = ""
    license: str = ""
    doi: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    column_count: int = 0
    row_count: int = 0
    data_types: Dict[str, str] = field(default_factory=dict)
    provenance: ProvenanceInfo = field(default_factory=ProvenanceInfo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "organization": self.organization,
            "version": self.version,
            "license": self.license,
            "doi": self.doi,
            "tags": list(self.tags),
            "column_count": self.column_count,
            "row_count": self.row_count,
            "data_types": dict(self.data_types),
            "provenance": self.provenance.to_dict(),
        }


@dataclass(frozen=True)
class Dataset:
    # identity
    id: str
    name: str
    source: str

    # physical
    size: int
    format: str
    created_at: datetime
    modified_at: datetime

    # derived
    fingerprint: Fingerprint
    metadata: DatasetMetadata = field(default_factory=DatasetMetadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "size": self.size,
            "format": self.format,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
            "fingerprint": self.fingerprint.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
