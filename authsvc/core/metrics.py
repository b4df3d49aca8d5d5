"""
Prometheus metrics for monitoring.

Metrics collected:
- HTTP request duration (histogram)
- HTTP request count by status code (counter)
- Active requests (gauge)
- Mutations by entity, operation and outcome (counter)
- Privacy decisions by entity and rule kind (counter)
- Cache hit/miss rate (counter)
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("authsvc_app", "Auth service application information")

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

# Mutation pipeline metrics
mutations_total = Counter(
    "mutations_total",
    "Mutations that went through the hook pipeline",
    ["entity", "operation", "outcome"],
)

mutation_duration_seconds = Histogram(
    "mutation_duration_seconds",
    "Time spent in the mutation pipeline in seconds",
    ["entity", "operation"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

privacy_decisions_total = Counter(
    "privacy_decisions_total",
    "Terminal privacy policy decisions",
    ["entity", "kind", "decision"],
)

# Cache metrics
cache_operations_total = Counter(
    "cache_operations_total",
    "Total cache operations",
    ["operation", "hit"],
)

# Business metrics
logins_total = Counter(
    "logins_total",
    "Login attempts",
    ["outcome"],
)
