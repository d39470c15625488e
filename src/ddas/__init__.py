"""ddas

Dataset duplication alert system: fingerprint submitted datasets, compare
them against every dataset seen before, and raise alerts for likely
duplicates.

Public API surface:
- ddas.service.DetectionService : submit datasets, query and prune alerts
- ddas.fingerprints : content / schema / statistical digests, Merkle root, Bloom filter
- ddas.similarity : Jaccard, cosine, structural and semantic similarity + tiers
- ddas.detection : the registry and alert log
- ddas.alerts : subscriptions and notification channels
- ddas.cli.main : CLI entrypoint
"""
__all__ = ["__version__"]
__version__ = "0.1.0"
