"""Central registry for Prometheus metrics used by the gardens service."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"gardens_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"gardens_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOURCE_FETCHES = Counter(
	"gardens_source_fetch_total",
	"Upstream fetches performed per source and outcome",
	["source", "outcome"],
)

SOURCE_LATENCY = Histogram(
	"gardens_source_fetch_duration_seconds",
	"Upstream fetch latency in seconds",
	["source"],
	buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

STALE_DISCARDS = Counter(
	"gardens_stale_results_discarded_total",
	"Fetch results dropped because a newer generation superseded them",
	["task"],
)

VOIDED_DROPPED = Counter(
	"gardens_voided_dropped_total",
	"Gardens removed from the directory by the voided registry",
	["chain_id"],
)

RESOLUTIONS = Counter(
	"gardens_resolutions_total",
	"Connected garden resolutions per outcome",
	["outcome"],
)

SCOPE_ACTIVATIONS = Counter(
	"gardens_scope_activations_total",
	"Garden-scoped collaborator chains mounted",
)


def observe_request(route: str, method: str, status: int, duration: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(duration)


def record_fetch(source: str, outcome: str, duration: float | None = None) -> None:
	SOURCE_FETCHES.labels(source=source, outcome=outcome).inc()
	if duration is not None:
		SOURCE_LATENCY.labels(source=source).observe(duration)


def inc_stale_discard(task: str) -> None:
	STALE_DISCARDS.labels(task=task).inc()


__all__ = [
	"REQUEST_COUNTER",
	"REQUEST_LATENCY",
	"SOURCE_FETCHES",
	"SOURCE_LATENCY",
	"STALE_DISCARDS",
	"VOIDED_DROPPED",
	"RESOLUTIONS",
	"SCOPE_ACTIVATIONS",
	"observe_request",
	"record_fetch",
	"inc_stale_discard",
]
