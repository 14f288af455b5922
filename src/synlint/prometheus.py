"""Prometheus metrics for synlint"""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, write_to_textfile

# ============================================================================
# Run Metrics
# ============================================================================

lint_runs_total = Counter(
    'synlint_lint_runs_total',
    'Total number of lint runs',
    ['cache'],  # enabled, disabled
)

lint_duration_seconds = Histogram(
    'synlint_lint_duration_seconds',
    'Time spent in one lint run',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0],
)


# ============================================================================
# File Metrics
# ============================================================================

files_checked_total = Counter(
    'synlint_files_checked_total',
    'Total number of files checked by a checker process',
    ['status'],  # ok, syntax, spawn_failure, timeout
)

cache_hits_total = Counter('synlint_cache_hits_total', 'Number of files skipped because their fingerprint was cached')

cache_misses_total = Counter('synlint_cache_misses_total', 'Number of files that had to be checked with cache enabled')

check_duration_seconds = Histogram(
    'synlint_check_duration_seconds',
    'Wall time of one checker process',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    # 5ms to 30s - a checker normally exits within tens of milliseconds
)


# ============================================================================
# Scheduler Metrics
# ============================================================================

running_tasks = Gauge('synlint_running_tasks', 'Current number of running checker processes')

process_limit = Gauge('synlint_process_limit', 'Configured maximum of concurrent checker processes')


def record_check(status: str, duration: float):
    """
    Record a completed checker process.

    Args:
        status: Outcome (ok, syntax, spawn_failure, timeout)
        duration: Process wall time in seconds
    """
    files_checked_total.labels(status=status).inc()
    check_duration_seconds.observe(duration)


def record_cache_lookup(hit: bool):
    """Record whether a file was skipped thanks to the cache."""
    if hit:
        cache_hits_total.inc()
    else:
        cache_misses_total.inc()


def record_lint_run(use_cache: bool, duration: float):
    """
    Record a finished lint run.

    Args:
        use_cache: Whether the run consulted and persisted the cache
        duration: Run duration in seconds
    """
    lint_runs_total.labels(cache='enabled' if use_cache else 'disabled').inc()
    lint_duration_seconds.observe(duration)


def write_metrics(path: str):
    """Write the default registry in text exposition format (node_exporter textfile)."""
    write_to_textfile(path, REGISTRY)
