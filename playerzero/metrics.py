from prometheus_client import Counter, Gauge, Histogram
# Prometheus metrics definitions

# Access decisions by resolved tier: anonymous, free_mode, paid, trial, expired
access_decisions_total = Counter(
    "access_decisions_total", "Access decisions resolved", ["tier"]
)

# Stats delta requests by period kind
stats_delta_requests_total = Counter(
    "stats_delta_requests_total", "Stats delta computations", ["period"]
)

# Explicit ranges rejected for having fewer than two snapshots
insufficient_data_total = Counter(
    "insufficient_data_total", "Delta requests rejected for insufficient data"
)

_delta_buckets = (
    0.001,
    0.005,
    0.01,
    0.05,
    0.1,
    0.5,
)

# Includes snapshot loading, not only the pure computation
stats_delta_seconds = Histogram(
    "stats_delta_seconds", "Stats delta latency", buckets=_delta_buckets
)

# Stat uploads by outcome: ok, daily_limit, regression, pokedex_limit
stat_updates_total = Counter(
    "stat_updates_total", "Stat update attempts", ["result"]
)

free_mode_refresh_total = Counter(
    "free_mode_refresh_total", "Free mode flag refreshes", ["result"]
)

free_mode_enabled = Gauge(
    "free_mode_enabled", "Last observed free mode flag value"
)

__all__ = [
    "access_decisions_total",
    "stats_delta_requests_total",
    "insufficient_data_total",
    "stats_delta_seconds",
    "stat_updates_total",
    "free_mode_refresh_total",
    "free_mode_enabled",
]
