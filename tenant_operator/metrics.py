"""
Prometheus metrics for the reconciliation loop.
"""
import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger("tenant-operator.metrics")

RECONCILES = Counter(
    "tenant_operator_reconciles_total",
    "Reconciliations by branch and outcome",
    ["branch", "result"],
)
RECONCILE_DURATION = Histogram(
    "tenant_operator_reconcile_duration_seconds",
    "Wall time of a single reconciliation",
)
NAMESPACE_OPERATIONS = Counter(
    "tenant_operator_namespace_operations_total",
    "Namespace ensure-exists / ensure-absent calls by outcome",
    ["operation", "result"],
)

_server_started = False


def start_metrics_server(port: int):
    """Expose /metrics on the given port (once per process). Port 0 disables."""
    global _server_started
    if _server_started or port <= 0:
        return
    start_http_server(port)
    _server_started = True
    logger.info(f"Metrics server listening on :{port}")
