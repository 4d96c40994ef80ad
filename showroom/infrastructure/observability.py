# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_LATENCY = Histogram(
    "showroom_request_latency_seconds",
    "Request latency",
    labelnames=("endpoint",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)
REQUEST_COUNTER = Counter(
    "showroom_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
CATALOG_MUTATIONS = Counter(
    "showroom_catalog_mutations_total",
    "Catalog create/update/delete operations",
    labelnames=("operation", "outcome"),
)
ASSET_UPLOADS = Counter(
    "showroom_asset_uploads_total",
    "Image uploads to the asset store",
    labelnames=("outcome",),
)
ASSET_DELETES = Counter(
    "showroom_asset_deletes_total",
    "Best-effort image deletions from the asset store",
    labelnames=("outcome",),
)


def observe_request(endpoint: str, status: int, duration: float) -> None:
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "ASSET_DELETES",
    "ASSET_UPLOADS",
    "CATALOG_MUTATIONS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "observe_request",
    "render_metrics",
]
