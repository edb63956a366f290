from prometheus_client import Counter, Histogram
from querygate.prom import REGISTRY


# -----------------------------------------------------------------------------
#  Safety gate metrics
# -----------------------------------------------------------------------------
safety_blocks_total = Counter(
    "safety_blocks_total",
    "Count of blocked SQL queries by safety checks",
    ["reason"],  # multiple_statements | not_select | forbidden_keyword
    registry=REGISTRY,
)

safety_checks_total = Counter(
    "safety_checks_total",
    "Total SQL queries checked by safety",
    ["ok"],  # "true" or "false"
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
#  Gateway metrics
# -----------------------------------------------------------------------------
gateway_queries_total = Counter(
    "gateway_queries_total",
    "Gateway query calls by outcome",
    ["status"],  # ok | validation_error | resource_exhausted | execution_error
    registry=REGISTRY,
)

gateway_query_duration_ms = Histogram(
    "gateway_query_duration_ms",
    "Wall time (ms) of gateway query calls, including pool acquisition",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 15000, 30000, 60000),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
#  Catalog metrics
# -----------------------------------------------------------------------------
catalog_requests_total = Counter(
    "catalog_requests_total",
    "Schema catalog introspection calls by outcome",
    ["status"],  # ok | error
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
#  Prime all counters with zero to ensure dashboards always have data
# -----------------------------------------------------------------------------
for reason in ("multiple_statements", "not_select", "forbidden_keyword"):
    safety_blocks_total.labels(reason=reason).inc(0)

for ok in ("true", "false"):
    safety_checks_total.labels(ok=ok).inc(0)

for status in ("ok", "validation_error", "resource_exhausted", "execution_error"):
    gateway_queries_total.labels(status=status).inc(0)

for status in ("ok", "error"):
    catalog_requests_total.labels(status=status).inc(0)
