"""Shared fixtures: a controllable clock and dataset builders."""

from datetime import datetime, timedelta, timezone

import pytest

from ddas.datasets.submission import DatasetSubmission, build_dataset
from ddas.fingerprints.generator import DatasetFingerprinter


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


BASE_SCHEMA = {"id": "number", "name": "string"}


def submission_payload(
    name="customers",
    content=None,
    data_types=None,
    title="Customer records",
    description="Monthly customer export",
    **metadata,
):
    meta = {"title": title, "description": description, **metadata}
    if data_types is not None:
        meta["data_types"] = data_types
    return {
        "name": name,
        "source": f"https://data.example.org/{name}.json",
        "content": content if content is not None else [{"id": 1, "name": "x"}],
        "metadata": meta,
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_dataset(clock):
    fingerprinter = DatasetFingerprinter()

    def _make(name="customers", content=None, data_types=BASE_SCHEMA, **kwargs):
        payload = submission_payload(name=name, content=content, data_types=data_types, **kwargs)
        return build_dataset(DatasetSubmission.from_dict(payload), fingerprinter, clock=clock)

    return _make
