"""Prometheus metrics for ledger activity, statements and the change feed"""

from prometheus_client import Counter, Histogram

# Ledger metrics
transaction_counter = Counter(
    "khata_transactions_total",
    "Transactions recorded",
    ["type"],  # credit | debit
)

transaction_amount_bucket_counter = Counter(
    "khata_transaction_amount_bucket",
    "Transactions recorded by amount bucket",
    ["bucket"],  # Rs.0-1k, Rs.1k-10k, Rs.10k-100k, Rs.100k+
)

invalid_transaction_counter = Counter(
    "khata_invalid_transactions_total",
    "Transactions rejected by ledger validation",
)

statement_counter = Counter(
    "khata_statements_generated_total",
    "Customer statements generated",
)

statement_latency_histogram = Histogram(
    "khata_statement_duration_seconds",
    "Statement generation time",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Change feed metrics
change_events_counter = Counter(
    "khata_change_events_total",
    "Change events published",
    ["table", "kind"],
)

change_events_dropped_counter = Counter(
    "khata_change_events_dropped_total",
    "Change events dropped for slow subscribers",
    ["table"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(type: str, amount_cents: int) -> None:
    """Record transaction metrics for sales/payment volume and size distribution"""
    transaction_counter.labels(type=type).inc()

    if amount_cents <= 100_000:
        bucket = "Rs.0-1k"
    elif amount_cents <= 1_000_000:
        bucket = "Rs.1k-10k"
    elif amount_cents <= 10_000_000:
        bucket = "Rs.10k-100k"
    else:
        bucket = "Rs.100k+"

    transaction_amount_bucket_counter.labels(bucket=bucket).inc()
