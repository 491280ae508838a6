"""Prometheus metrics for monitoring cash-out plans, statements and month rollover"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Cash-out metrics
cash_out_applied_counter = Counter(
    "budget_nikal_cash_out_applied_total",
    "Cash-out plans applied",
)

cash_out_amount_histogram = Histogram(
    "budget_nikal_cash_out_amount",
    "Total amount withdrawn per applied cash-out plan",
    buckets=[1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000, 500_000],
)

cash_out_reset_counter = Counter(
    "budget_nikal_cash_out_reset_total",
    "Cash-out plans reset",
)

# Ledger metrics
statements_created_counter = Counter(
    "budget_nikal_statements_created_total",
    "Card statements created from billing cycle predictions",
)

cycle_prediction_failures_counter = Counter(
    "budget_nikal_cycle_prediction_failures_total",
    "Billing cycle predictions that hit the iteration cap",
)

months_created_counter = Counter(
    "budget_nikal_months_created_total",
    "Budget months created through next-month rollover",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_cash_out(total: Decimal) -> None:
    """Record an applied cash-out plan and its size"""
    cash_out_applied_counter.inc()
    cash_out_amount_histogram.observe(float(total))
