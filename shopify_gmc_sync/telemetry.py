"""OpenTelemetry helpers for sync metrics."""

from typing import Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader


_meter_provider_initialized = False


def init_metrics() -> None:
    """Initialize OpenTelemetry metrics with a console exporter."""
    global _meter_provider_initialized
    if _meter_provider_initialized:
        return
    reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    provider = MeterProvider(metric_readers=[reader])
    metrics.set_meter_provider(provider)
    _meter_provider_initialized = True


def _get_meter(meter_provider: Optional[metrics.MeterProvider] = None) -> metrics.Meter:
    if meter_provider is not None:
        return meter_provider.get_meter("shopify_gmc_sync")
    init_metrics()
    return metrics.get_meter("shopify_gmc_sync")


def get_push_duration_histogram(
    enabled: bool = True,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> Optional[metrics.Histogram]:
    """Return a histogram for per-product push duration, or None when disabled."""
    if not enabled:
        return None
    return _get_meter(meter_provider).create_histogram(
        name="gmc.sync.push.duration",
        unit="ms",
        description="Duration of Content API insert/update calls per bundle",
    )


def get_outcome_counter(
    enabled: bool = True,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> Optional[metrics.Counter]:
    """Return a counter of push outcomes by status, or None when disabled."""
    if not enabled:
        return None
    return _get_meter(meter_provider).create_counter(
        name="gmc.sync.outcomes",
        description="Bundles pushed, updated or failed",
    )
