"""Prometheus 指标定义与上报辅助函数。"""
from __future__ import annotations

from prometheus_client import Counter, Histogram

STORE_REQUESTS = Counter(
    "sf_graphdb_requests",
    "GraphDB HTTP 请求次数（按操作与状态码）",
    ["operation", "status"],
)
STORE_REQUEST_SECONDS = Histogram(
    "sf_graphdb_request_seconds",
    "GraphDB HTTP 请求耗时（秒）",
    ["operation"],
)
STORE_FAILURES = Counter(
    "sf_graphdb_failures",
    "GraphDB 请求失败次数（按原因）",
    ["operation", "reason"],
)
TRANSACTIONS = Counter(
    "sf_graphdb_transactions",
    "事务生命周期事件（begin/commit/rollback）",
    ["outcome"],
)


def observe_store_response(operation: str, status_code: int, seconds: float) -> None:
    STORE_REQUESTS.labels(operation=operation, status=str(status_code)).inc()
    STORE_REQUEST_SECONDS.labels(operation=operation).observe(seconds)


def observe_store_failure(operation: str, reason: str) -> None:
    STORE_FAILURES.labels(operation=operation, reason=reason).inc()


def observe_transaction(outcome: str) -> None:
    TRANSACTIONS.labels(outcome=outcome).inc()
