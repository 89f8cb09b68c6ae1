"""
Prometheus Metrics for the Gateway.

Metrics Exposed:
    gateway_conversions_total{engine,status}        - Conversions by outcome
    gateway_conversion_duration_seconds{engine}     - Conversion latency
    gateway_audio_bytes_total                       - Bytes of MP3 written
    gateway_uploads_total{kind,status}              - Transcript/audio/text uploads

Usage:
    from tts_gateway.core.metrics import metrics

    metrics.record_conversion("gtts", "success", duration=0.8, audio_bytes=14208)
    metrics.record_upload("audio", "success")
    content, content_type = metrics.get_metrics_response()

Scrape Config Example:
    scrape_configs:
      - job_name: 'tts-gateway'
        static_configs:
          - targets: ['localhost:3000']
        metrics_path: '/metrics'
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class GatewayMetrics:
    """
    Metric collectors bound to a private CollectorRegistry.

    A private registry keeps repeated app construction (tests, CLI) from
    tripping over duplicate registrations in the global default registry.
    """

    def __init__(self):
        self._registry = CollectorRegistry()

        self._conversions_total = Counter(
            "gateway_conversions_total",
            "Total conversion requests",
            ["engine", "status"],
            registry=self._registry,
        )

        # Remote synthesis is seconds-scale; buckets stretch accordingly
        self._conversion_duration = Histogram(
            "gateway_conversion_duration_seconds",
            "Conversion duration in seconds",
            ["engine"],
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        self._audio_bytes_total = Counter(
            "gateway_audio_bytes_total",
            "Total audio bytes written to the artifact directory",
            registry=self._registry,
        )

        self._uploads_total = Counter(
            "gateway_uploads_total",
            "Total uploads handled",
            ["kind", "status"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_conversion(
        self,
        engine: str,
        status: str,
        duration: float | None = None,
        audio_bytes: int = 0,
    ) -> None:
        """
        Record a finished conversion.

        Args:
            engine: "gtts" or "edge"
            status: "success", "invalid", "engine_error" or "storage_error"
            duration: Seconds spent, observed only when given
            audio_bytes: Size of the written artifact
        """
        self._conversions_total.labels(engine=engine, status=status).inc()
        if duration is not None and duration >= 0:
            self._conversion_duration.labels(engine=engine).observe(duration)
        if audio_bytes > 0:
            self._audio_bytes_total.inc(audio_bytes)

    def record_upload(self, kind: str, status: str) -> None:
        """kind: "transcript", "audio" or "text"."""
        self._uploads_total.labels(kind=kind, status=status).inc()

    def get_metrics_response(self) -> tuple[bytes, str]:
        """Return (body, content_type) for the /metrics endpoint."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Import this to record metrics: from tts_gateway.core.metrics import metrics
metrics = GatewayMetrics()
