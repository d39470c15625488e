import hashlib

import pytest

from ddas.fingerprints import (
    DatasetFingerprinter,
    FingerprintError,
    HashParams,
    bloom_filter,
    bloom_might_contain,
    chunk_hashes,
    column_statistics,
    content_hash,
    merkle_root,
    schema_hash,
    statistical_hash,
)


def sha(s):
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


class TestContentHash:
    def test_known_digest(self):
        assert content_hash("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_bytes_and_str_with_same_bytes_agree(self):
        assert content_hash(b"abc") == content_hash("abc")

    def test_deterministic(self):
        rows = [{"id": 1, "name": "x"}, {"id": 2, "name": "y"}]
        assert content_hash(rows) == content_hash([dict(r) for r in rows])

    def test_any_change_changes_hash(self):
        assert content_hash([{"id": 1}]) != content_hash([{"id": 2}])
        assert content_hash("abc") != content_hash("abd")


class TestSchemaHash:
    def test_order_independent(self):
        a = {"b": "string", "a": "number", "c": "boolean"}
        b = {"c": "boolean", "a": "number", "b": "string"}
        assert schema_hash(a) == schema_hash(b)

    def test_sorted_pairs_joined_with_pipe(self):
        assert schema_hash({"b": "string", "a": "number"}) == sha("a:number|b:string")

    def test_type_change_changes_hash(self):
        assert schema_hash({"a": "number"}) != schema_hash({"a": "string"})


class TestStatisticalHash:
    def test_empty_input_is_empty_string(self):
        assert statistical_hash([]) == ""
        assert statistical_hash(None) == ""

    def test_numeric_and_categorical_columns(self):
        rows = [
            {"id": 1, "name": "x"},
            {"id": 3, "name": "x"},
            {"id": None, "name": "y"},
        ]
        stats = column_statistics(rows)
        assert stats["id"] == {"type": "numeric", "mean": 2.0, "min": 1, "max": 3, "count": 2}
        assert stats["name"] == {"type": "categorical", "unique_count": 2, "most_common": "x", "count": 3}

    def test_mixed_column_uses_numeric_values_only(self):
        stats = column_statistics([{"v": 1}, {"v": "a"}, {"v": 5}])
        assert stats["v"]["type"] == "numeric"
        assert stats["v"]["count"] == 2
        assert stats["v"]["mean"] == 3.0

    def test_booleans_are_not_numeric(self):
        stats = column_statistics([{"f": True}, {"f": False}, {"f": True}])
        assert stats["f"]["type"] == "categorical"
        assert stats["f"]["unique_count"] == 2

    def test_all_null_column_is_skipped(self):
        assert "gone" not in column_statistics([{"gone": None, "id": 1}])

    def test_row_order_does_not_matter(self):
        rows = [{"id": 1, "name": "x"}, {"id": 3, "name": "x"}, {"id": 2, "name": "y"}]
        assert statistical_hash(rows) == statistical_hash(list(reversed(rows)))

    def test_different_statistics_change_hash(self):
        assert statistical_hash([{"id": 1}]) != statistical_hash([{"id": 2}])


class TestMerkleRoot:
    def test_empty_and_single(self):
        assert merkle_root([]) == ""
        assert merkle_root(["a"]) == "a"

    def test_pair(self):
        assert merkle_root(["a", "b"]) == sha("ab")

    def test_odd_count_duplicates_last(self):
        assert merkle_root(["a", "b", "c"]) == sha(sha("ab") + sha("cc"))

    def test_chunk_hashes_cover_content(self):
        hashes = chunk_hashes("a" * 2500, chunk_size=1024)
        assert len(hashes) == 3
        assert hashes[0] == sha("a" * 1024)
        assert hashes[2] == sha("a" * 452)


class TestBloomFilter:
    def test_bit_string_shape(self):
        bits = bloom_filter(["alpha", "beta"], size=64, hash_count=3)
        assert len(bits) == 64
        assert set(bits) <= {"0", "1"}
        assert 1 <= bits.count("1") <= 6

    def test_empty_items_all_zero(self):
        assert bloom_filter([], size=16) == "0" * 16

    def test_inserted_items_are_members(self):
        items = [f"row-{i}" for i in range(20)]
        bits = bloom_filter(items, size=1000, hash_count=3)
        assert all(bloom_might_contain(bits, item, hash_count=3) for item in items)

    def test_indexes_follow_digest_prefix(self):
        bits = bloom_filter(["x"], size=1000, hash_count=1)
        idx = int(sha("x0")[:8], 16) % 1000
        assert bits[idx] == "1"
        assert bits.count("1") == 1

    def test_empty_bits_contain_nothing(self):
        assert bloom_might_contain("", "x") is False


class TestDatasetFingerprinter:
    def test_full_fingerprint(self):
        rows = [{"id": 1, "name": "x"}]
        schema = {"id": "number", "name": "string"}
        fp = DatasetFingerprinter().fingerprint(rows, schema)
        assert fp.content_hash == content_hash(rows)
        assert fp.schema_hash == schema_hash(schema)
        assert fp.statistical_hash == statistical_hash(rows)
        assert fp.merkle_root == merkle_root(chunk_hashes(rows, 1024))
        assert fp.bloom_filter is not None and len(fp.bloom_filter) == 1000
        assert fp.fingerprint_version == "v1"
        assert fp.similarity is None

    def test_optional_digests_can_be_disabled(self):
        params = HashParams(merkle_enabled=False, bloom_enabled=False, fingerprint_version="v2")
        fp = DatasetFingerprinter(params).fingerprint("raw text", {"line": "string"})
        assert fp.merkle_root is None
        assert fp.bloom_filter is None
        assert fp.statistical_hash == ""
        assert fp.fingerprint_version == "v2"

    def test_missing_schema_fails_fast(self):
        with pytest.raises(FingerprintError):
            DatasetFingerprinter().fingerprint([{"id": 1}], None)

    def test_missing_content_fails_fast(self):
        with pytest.raises(FingerprintError):
            DatasetFingerprinter().fingerprint(None, {"id": "number"})

    def test_malformed_schema_fails_fast(self):
        with pytest.raises(FingerprintError):
            DatasetFingerprinter().fingerprint([{"id": 1}], ["id"])
        with pytest.raises(FingerprintError):
            DatasetFingerprinter().fingerprint([{"id": 1}], {"id": 3})

    def test_fingerprint_error_is_value_error(self):
        assert issubclass(FingerprintError, ValueError)


class TestHashParams:
    def test_from_dict(self):
        params = HashParams.from_dict({
            "fingerprint_version": "v3",
            "merkle": {"enabled": False, "chunk_size": 64},
            "bloom": {"size": 128, "hash_count": 5},
        })
        assert params == HashParams(
            fingerprint_version="v3",
            merkle_enabled=False,
            chunk_size=64,
            bloom_enabled=True,
            bloom_size=128,
            bloom_hash_count=5,
        )

    def test_defaults(self):
        assert HashParams.from_dict(None) == HashParams()

    def test_rejects_non_positive_sizes(self):
        with pytest.raises(ValueError):
            HashParams.from_dict({"merkle": {"chunk_size": 0}})
        with pytest.raises(ValueError):
            HashParams.from_dict({"bloom": {"size": 0}})
