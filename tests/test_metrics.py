from __future__ import annotations

from dlp_numerical_stats.observability import metrics


def test_exporter_starts_once(mocker) -> None:
    start = mocker.patch.object(metrics, "start_http_server")
    mocker.patch.object(metrics, "_EXPORTER_STARTED", False)

    metrics.ensure_metrics_exporter(9100)
    metrics.ensure_metrics_exporter(9100)

    start.assert_called_once_with(9100)
