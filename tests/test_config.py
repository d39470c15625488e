from pathlib import Path

import pytest

from ddas.config import DDASConfig
from ddas.run_id import generate_run_id, resolve_out_dir, resolve_run_id

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "ddas.yaml"


def test_defaults():
    cfg = DDASConfig.load(None)
    assert cfg.detection.thresholds.exact == 0.95
    assert cfg.detection.retention_days == 30
    assert cfg.fingerprints.bloom_size == 1000
    assert cfg.alerts.parquet is True
    assert cfg.alerts.subscriptions == []


def test_repo_config_loads():
    cfg = DDASConfig.load(str(REPO_CONFIG))
    assert cfg.detection.thresholds.potential <= cfg.detection.thresholds.similar <= cfg.detection.thresholds.exact
    assert cfg.alerts.subscriptions


def test_yaml_overrides(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "fingerprints:\n"
        "  fingerprint_version: v9\n"
        "  bloom: {enabled: false}\n"
        "detection:\n"
        "  thresholds: {exact: 0.99, similar: 0.9, potential: 0.7}\n"
        "  retention_days: 5\n"
        "  default_quality: {completeness: 0.5}\n",
        encoding="utf-8",
    )
    cfg = DDASConfig.load(str(path))
    assert cfg.fingerprints.fingerprint_version == "v9"
    assert cfg.fingerprints.bloom_enabled is False
    assert cfg.detection.thresholds.similar == 0.9
    assert cfg.detection.retention_days == 5
    assert cfg.detection.default_quality.completeness == 0.5
    assert cfg.detection.default_quality.freshness == 1.0


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        DDASConfig.from_dict({"detection": {"thresholds": {"exact": 0.5}}})
    with pytest.raises(ValueError):
        DDASConfig.from_dict({"detection": {"retention_days": -1}})
    with pytest.raises(ValueError):
        DDASConfig.from_dict({"alerts": {"subscriptions": [{"filters": [{"type": "x", "operator": "eq"}]}]}})


def test_run_id_resolution():
    assert resolve_run_id({"run_id": " nightly "}) == "nightly"
    assert resolve_run_id({"run_id_auto": {"enabled": False}}) == "scan"
    rid = generate_run_id({"prefix_digits": 8, "suffix_digits": 0}, ["data/uploads.jsonl"])
    name, date = rid.split("_")
    assert name == "uploads"
    assert len(date) == 8 and date.isdigit()
    assert resolve_out_dir({"out_dir": "out/{run_id}"}, "r1") == "out/r1"
    assert resolve_out_dir({}, "r1") == "storage/r1"
