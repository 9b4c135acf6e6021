"""Prometheus metrics for Taskora.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge

# ---------------------------------------------------------------------------
# Cache metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "taskora_cache_operations_total",
    "Total note cache operations",
    ["operation"],  # hit, miss, invalidate, clear
)

# ---------------------------------------------------------------------------
# Persistent store metrics
# ---------------------------------------------------------------------------

STORE_OPERATIONS = Counter(
    "taskora_store_operations_total",
    "Total persistent store operations",
    ["backend", "operation"],  # get, set, remove
)

# ---------------------------------------------------------------------------
# Backup metrics
# ---------------------------------------------------------------------------

BACKUP_OPERATIONS = Counter(
    "taskora_backup_operations_total",
    "Total backup export/import operations",
    ["operation"],  # export, import_ok, import_failed
)

# ---------------------------------------------------------------------------
# Day window metrics
# ---------------------------------------------------------------------------

WINDOW_EXPANSIONS = Counter(
    "taskora_window_expansions_total",
    "Day window builds and expansions",
    ["direction"],  # init, past, future
)

WINDOW_SIZE = Gauge(
    "taskora_window_days",
    "Number of days currently materialized in the day window",
)
