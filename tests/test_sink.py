import pyarrow.parquet as pq
import pytest

from ddas.analytics import AlertSink, alert_row, read_alerts
from ddas.detection import DuplicationDetector
from ddas.monitor.report import alerts_table


@pytest.fixture
def alerts(clock, make_dataset):
    detector = DuplicationDetector(clock=clock)
    detector.add_dataset(make_dataset(name="a"))
    detector.add_dataset(make_dataset(name="b"))
    clock.advance(days=1)
    detector.add_dataset(make_dataset(name="c"))
    return detector.get_alerts()


def test_flush_partitions_by_date(alerts, tmp_path):
    sink = AlertSink(out_dir=str(tmp_path), run_id="r1")
    for a in alerts:
        sink.emit(a)
    paths = sink.flush()

    assert [p.split("date=")[1][:10] for p in paths] == ["2026-01-01", "2026-01-02"]
    assert sink.written == 3
    assert sink.flush() == []

    agg = pq.read_table(tmp_path / "aggregates" / "alert_aggregates.parquet").to_pylist()
    assert agg[0]["alerts"] == 3
    assert agg[0]["exact"] == 3
    assert agg[0]["confidence_p50"] == 1.0


def test_flush_appends(alerts, tmp_path):
    sink = AlertSink(out_dir=str(tmp_path), run_id="r1")
    sink.emit(alerts[0])
    sink.flush()
    sink.emit(alerts[0])
    sink.flush()

    path = tmp_path / "alerts" / "date=2026-01-01" / "alerts.parquet"
    assert len(read_alerts(str(path))) == 2
    assert len(pq.read_table(tmp_path / "aggregates" / "alert_aggregates.parquet")) == 2


def test_alert_row_and_table(alerts):
    row = alert_row(alerts[0], "r1")
    assert row["original_dataset_name"] == "a"
    assert row["duplicate_dataset_name"] == "b"
    assert row["confidence"] == 1.0
    table = alerts_table([row])
    assert table.row_count == 1
