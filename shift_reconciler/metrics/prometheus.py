# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "reconciler_requests_total",
    "Total HTTP requests to the reconciliation service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "reconciler_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "reconciler_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Upstream Metrics (used by collaborator clients) ──
UPSTREAM_REQUESTS = Counter(
    "reconciler_upstream_requests_total",
    "Calls issued to collaborator services",
    ["service", "method", "status"],
)
UPSTREAM_LATENCY = Histogram(
    "reconciler_upstream_duration_seconds",
    "Collaborator call latency in seconds",
    ["service"],
)
UPSTREAM_ERRORS = Counter(
    "reconciler_upstream_errors_total",
    "Collaborator call failures by classification",
    ["service", "kind"],
)

# ── Business Metrics (updated by service layer only) ──
BOARDS_BUILT = Counter(
    "reconciler_boards_built_total",
    "Reconciliation boards rebuilt from a full re-fetch",
)
ASSIGNMENTS_CREATED = Counter(
    "reconciler_assignments_created_total",
    "Assignments confirmed through the mutator",
    ["operation"],
)
ASSIGNMENTS_CANCELLED = Counter(
    "reconciler_assignments_cancelled_total",
    "Assignments cancelled through the mutator",
    ["operation"],
)
ASSIGNMENT_CONFLICTS = Counter(
    "reconciler_assignment_conflicts_total",
    "Capacity races reported by the assignment service",
    ["operation"],
)
BULK_ITEM_FAILURES = Counter(
    "reconciler_bulk_item_failures_total",
    "Per-item failures swallowed by roster replacement",
    ["operation"],
)
