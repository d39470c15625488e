import json

import pytest

from ddas.datasets import (
    DEFAULT_QUALITY,
    DatasetSubmission,
    LocalJSONLSubmissions,
    build_dataset,
    infer_schema,
)
from ddas.fingerprints import DatasetFingerprinter, FingerprintError, canonical_bytes

from conftest import submission_payload


def test_infer_schema_uses_first_non_null_value():
    rows = [{"a": None, "b": "x"}, {"a": 1, "c": True}, {"a": "late"}]
    assert infer_schema(rows) == {"a": "number", "b": "string", "c": "boolean"}


@pytest.mark.parametrize(
    "payload",
    [
        {"content": [{"id": 1}]},
        {"name": "x"},
        {"name": "x", "content": [{"id": 1}], "metadata": ["not", "a", "mapping"]},
        ["not", "an", "object"],
    ],
)
def test_malformed_submissions_rejected(payload):
    with pytest.raises(FingerprintError):
        DatasetSubmission.from_dict(payload)


def test_build_dataset_declared_schema(clock):
    payload = submission_payload(
        content=[{"id": 1, "name": "x"}, {"id": 2, "name": "y"}],
        data_types={"id": "number", "name": "string", "email": "string"},
        tags=["crm"],
        provenance={"quality": {"freshness": 0.5}},
    )
    ds = build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)

    assert ds.id.startswith("dataset_")
    assert ds.created_at == ds.modified_at == clock()
    assert ds.size == len(canonical_bytes(payload["content"]))
    assert ds.metadata.data_types == {"id": "number", "name": "string", "email": "string"}
    assert ds.metadata.column_count == 3
    assert ds.metadata.row_count == 2
    assert ds.metadata.tags == ["crm"]
    assert ds.metadata.provenance.source_url == payload["source"]
    assert ds.metadata.provenance.quality.freshness == 0.5
    assert ds.metadata.provenance.quality.completeness == DEFAULT_QUALITY.completeness


def test_build_dataset_infers_schema(clock):
    payload = submission_payload(content=[{"station": "KSEA", "temp_c": 11.5}])
    ds = build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)
    assert ds.metadata.data_types == {"station": "string", "temp_c": "number"}


def test_text_content_needs_declared_schema(clock):
    payload = submission_payload(content="free text, no rows")
    with pytest.raises(FingerprintError):
        build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)


def test_text_content_with_declared_schema(clock):
    payload = submission_payload(content="line one\nline two", data_types={"line": "string"})
    ds = build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)
    assert ds.metadata.row_count == 0
    assert ds.fingerprint.statistical_hash == ""


def test_invalid_provenance_timestamp_rejected(clock):
    payload = submission_payload(data_types={"id": "number"}, provenance={"downloaded_at": "yesterday"})
    with pytest.raises(FingerprintError):
        build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)


@pytest.mark.parametrize(
    "metadata",
    [
        {"provenance": {"quality": {"completeness": "high"}}},
        {"provenance": {"quality": [0.9, 0.8]}},
        {"provenance": "from a friend"},
        {"column_count": None},
        {"row_count": "many"},
    ],
)
def test_invalid_metadata_values_rejected(clock, metadata):
    payload = submission_payload(data_types={"id": "number"}, **metadata)
    with pytest.raises(FingerprintError, match="invalid metadata|must be an object"):
        build_dataset(DatasetSubmission.from_dict(payload), DatasetFingerprinter(), clock=clock)


def test_dataset_to_dict(make_dataset):
    d = make_dataset().to_dict()
    assert d["fingerprint"]["content_hash"]
    assert d["metadata"]["title"] == "Customer records"
    assert d["created_at"].startswith("2026-01-01")


class TestLocalJSONLSubmissions:
    def _write(self, path, lines):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def test_stream_skips_invalid_lines(self, tmp_path):
        f = tmp_path / "subs.jsonl"
        self._write(f, [json.dumps(submission_payload(name="a")), "{not json", "", json.dumps({"name": "b"})])
        items = list(LocalJSONLSubmissions(str(f)).stream())
        assert [loc for loc, _ in items] == [f"{f}:1", f"{f}:4"]
        assert items[0][1]["name"] == "a"

    def test_directory_and_glob_resolution(self, tmp_path):
        self._write(tmp_path / "a.jsonl", [json.dumps({"name": "a"})])
        self._write(tmp_path / "nested" / "b.jsonl", [json.dumps({"name": "b"})])
        self._write(tmp_path / "ignored.txt", ["x"])

        by_dir = LocalJSONLSubmissions(str(tmp_path))
        assert by_dir.metadata()["file_count"] == 2
        by_glob = LocalJSONLSubmissions(str(tmp_path / "*.jsonl"))
        assert by_glob.files == [str(tmp_path / "a.jsonl")]

    def test_missing_file_is_skipped(self, tmp_path):
        source = LocalJSONLSubmissions([str(tmp_path / "missing.jsonl")])
        assert list(source.stream()) == []
        assert source.metadata()["total_size_bytes"] == 0
