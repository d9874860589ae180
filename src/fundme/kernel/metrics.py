"""
Prometheus metrics collection for FundMe.

Provides observability into transactions, proxy forwarding and faucet payouts.
"""

from prometheus_client import Counter, Histogram, start_http_server

# ============================================================================
# Transaction Metrics
# ============================================================================

transactions_total = Counter(
    "fundme_transactions_total",
    "Total number of transactions executed",
    ["function", "status"],  # status: success, failure
)

transaction_duration_seconds = Histogram(
    "fundme_transaction_duration_seconds",
    "Duration of transaction execution in seconds",
    ["function"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

# ============================================================================
# Event Store Metrics
# ============================================================================

events_appended_total = Counter(
    "fundme_events_appended_total",
    "Total number of events appended to the event store",
    ["event_type"],
)

# ============================================================================
# Proxy Metrics
# ============================================================================

proxy_dispatch_total = Counter(
    "fundme_proxy_dispatch_total",
    "Total number of committed calls forwarded by proxies",
    ["function"],
)

# ============================================================================
# Faucet Metrics
# ============================================================================

faucet_deposits_total = Counter(
    "fundme_faucet_deposits_total",
    "Total number of accepted faucet deposits",
)

faucet_tokens_dispensed_total = Counter(
    "fundme_faucet_tokens_dispensed_total",
    "Total token base units paid out by faucets",
)


def start_metrics_server(port: int = 9090) -> None:
    """
    Start Prometheus metrics HTTP server.

    Args:
        port: Port to listen on (default: 9090)
    """
    start_http_server(port)
