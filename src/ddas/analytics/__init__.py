from .sink import AlertSink, alert_row, alerts_schema, read_alerts

__all__ = ["AlertSink", "alert_row", "alerts_schema", "read_alerts"]
