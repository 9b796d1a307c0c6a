"""Prometheus metrics for monitoring loan creation, payments and HTTP latency"""

from prometheus_client import Counter, Histogram

# Loan metrics
loan_created_counter = Counter(
    "fundo_loans_created_total",
    "Total loans created",
)

payment_counter = Counter(
    "fundo_payments_total",
    "Payments submitted against loans",
    ["outcome"],  # applied | rejected
)

loan_paid_counter = Counter(
    "fundo_loans_paid_total",
    "Loans whose balance reached zero",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(applied: bool, paid_off: bool = False) -> None:
    """Record payment outcome and loan payoff"""
    payment_counter.labels(outcome="applied" if applied else "rejected").inc()
    if applied and paid_off:
        loan_paid_counter.inc()
