"""
Prometheus metrics for provider calls, credit spend and rate limiter waits.
"""

from prometheus_client import Counter, Histogram

PROVIDER_CALLS = Counter(
    "enrichment_provider_calls_total",
    "Provider calls made by the orchestrator",
    ["provider", "capability", "outcome"],  # outcome: success, failure, error
)

CREDITS_CHARGED = Counter(
    "enrichment_credits_charged_total",
    "Credits charged to clients for provider calls",
    ["provider", "capability"],
)

PROVIDER_LATENCY = Histogram(
    "enrichment_provider_latency_seconds",
    "Provider call latency in seconds",
    ["provider", "capability"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

RATE_LIMIT_WAITS = Counter(
    "enrichment_rate_limit_waits_total",
    "Callers that had to queue at a rate limiter",
    ["limiter"],
)
