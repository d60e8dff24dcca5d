"""Unit tests for report and dashboard aggregations"""

import pytest
from datetime import date, datetime, timedelta, timezone
from khata.domain.exceptions import InvalidTransactionError
from khata.domain.models import Customer, CustomerSummary, Product, Transaction
from khata.domain.reports import (
    build_alerts,
    build_report,
    customer_breakdown,
    daily_sales,
    dashboard_metrics,
    format_amount,
    top_products,
)


def _txn(id, type, amount, when, customer_id="c1", product_id=None) -> Transaction:
    return Transaction(
        id=id,
        customer_id=customer_id,
        type=type,
        amount_cents=amount,
        created_at=when,
        product_id=product_id,
    )


def _at(y, m, d, h=10) -> datetime:
    return datetime(y, m, d, h, tzinfo=timezone.utc)


def test_format_amount():
    assert format_amount(1500050) == "Rs. 15,000.50"
    assert format_amount(0) == "Rs. 0.00"
    assert format_amount(-250) == "-Rs. 2.50"
    assert format_amount(100, currency="PKR") == "PKR 1.00"


def test_daily_sales_groups_credits_by_day():
    txns = [
        _txn(1, "credit", 1000, _at(2026, 3, 1, 9)),
        _txn(2, "credit", 500, _at(2026, 3, 1, 18)),
        _txn(3, "debit", 700, _at(2026, 3, 1, 19)),
        _txn(4, "credit", 200, _at(2026, 3, 3)),
    ]

    series = daily_sales(txns)

    assert [(s.day, s.amount_cents) for s in series] == [(date(2026, 3, 1), 1500), (date(2026, 3, 3), 200)]


def test_daily_sales_keeps_last_days():
    start = _at(2026, 1, 1)
    txns = [_txn(i, "credit", 100, start + timedelta(days=i)) for i in range(20)]

    series = daily_sales(txns, days=14)

    assert len(series) == 14
    assert series[-1].day == date(2026, 1, 20)


def test_top_products_ranks_credited_sales():
    products = {
        "p1": Product(id="p1", name="Premium Shirt", price_cents=150000, stock_quantity=2),
        "p2": Product(id="p2", name="Rice 5kg", price_cents=90000, stock_quantity=40),
    }
    txns = [
        _txn(1, "credit", 1000, _at(2026, 3, 1), product_id="p1"),
        _txn(2, "credit", 3000, _at(2026, 3, 1), product_id="p2"),
        _txn(3, "credit", 2500, _at(2026, 3, 2), product_id="p1"),
        _txn(4, "debit", 9999, _at(2026, 3, 2), product_id="p1"),
        _txn(5, "credit", 400, _at(2026, 3, 2)),
    ]

    ranked = top_products(txns, products)

    assert [(r.name, r.amount_cents) for r in ranked] == [("Premium Shirt", 3500), ("Rice 5kg", 3000)]


def test_top_products_fails_fast_on_bad_record():
    products = {"p1": Product(id="p1", name="Premium Shirt", price_cents=150000, stock_quantity=2)}
    txns = [
        _txn(1, "credit", 1000, _at(2026, 3, 1), product_id="p1"),
        _txn(2, "credit", -500, _at(2026, 3, 1), product_id="p1"),
    ]

    with pytest.raises(InvalidTransactionError):
        top_products(txns, products)


def test_customer_breakdown_by_balance():
    txns = [
        _txn(1, "credit", 5000, _at(2026, 3, 1), customer_id="c1"),
        _txn(2, "debit", 2000, _at(2026, 3, 2), customer_id="c1"),
        _txn(3, "credit", 9000, _at(2026, 3, 2), customer_id="c2"),
        _txn(4, "debit", 1000, _at(2026, 3, 2), customer_id="ghost"),
    ]

    rows = customer_breakdown(txns, {"c1": "Ahmad Ali", "c2": "Sara Khan"})

    assert [(r.name, r.balance_cents) for r in rows] == [("Sara Khan", 9000), ("Ahmad Ali", 3000), ("Unknown", -1000)]
    assert rows[1].credits_cents == 5000
    assert rows[1].debits_cents == 2000


def test_build_report_totals():
    txns = [
        _txn(1, "credit", 15000, _at(2026, 3, 1)),
        _txn(2, "debit", 8000, _at(2026, 3, 2)),
    ]

    report = build_report(txns, {"c1": "Ahmad Ali"}, {})

    assert report.totals.total_credits_cents == 15000
    assert report.totals.total_debits_cents == 8000
    assert report.totals.net_cents == 7000
    assert report.totals.transaction_count == 2
    assert report.top_products == []


def test_dashboard_metrics_growth():
    txns = [
        _txn(1, "credit", 10000, _at(2026, 2, 10)),
        _txn(2, "credit", 15000, _at(2026, 3, 5)),
        _txn(3, "debit", 4000, _at(2026, 3, 6)),
        _txn(4, "credit", 99999, _at(2025, 12, 1)),
    ]

    metrics = dashboard_metrics(txns, customer_count=3, today=date(2026, 3, 20))

    assert metrics.total_sales_cents == 124999
    assert metrics.total_payments_cents == 4000
    assert metrics.pending_amount_cents == 120999
    assert metrics.customer_count == 3
    assert metrics.sales_growth_percent == 50.0


def test_dashboard_metrics_growth_without_last_month():
    metrics = dashboard_metrics([_txn(1, "credit", 100, _at(2026, 3, 5))], customer_count=1, today=date(2026, 3, 20))
    assert metrics.sales_growth_percent == 0.0


def test_dashboard_metrics_january_compares_with_december():
    txns = [_txn(1, "credit", 200, _at(2025, 12, 15)), _txn(2, "credit", 100, _at(2026, 1, 2))]
    metrics = dashboard_metrics(txns, customer_count=1, today=date(2026, 1, 10))
    assert metrics.sales_growth_percent == -50.0


def test_build_alerts():
    customer = Customer(id="c1", name="Ahmad Ali", created_at=_at(2025, 1, 1))
    summaries = [
        CustomerSummary(customer=customer, balance_cents=1500000, status="overdue"),
        CustomerSummary(customer=customer, balance_cents=500000, status="overdue"),
        CustomerSummary(customer=customer, balance_cents=800000, status="pending"),
    ]
    products = [
        Product(id="p1", name="Premium Shirt", price_cents=100, stock_quantity=2),
        Product(id="p2", name="Out", price_cents=100, stock_quantity=0),
        Product(id="p3", name="Plenty", price_cents=100, stock_quantity=50),
    ]

    alerts = build_alerts(summaries, products, today=date(2026, 3, 28))

    assert alerts == [
        "2 customers have overdue payments (Rs. 20,000.00 total)",
        "2 products are running low on stock",
        "Monthly report for March is ready to generate",
    ]


def test_build_alerts_quiet_mid_month():
    assert build_alerts([], [], today=date(2026, 3, 10)) == []
