"""Report and dashboard aggregations over transaction history"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence
from khata.domain.models import (
    Transaction,
    Product,
    CustomerSummary,
    Report,
    DailySales,
    NamedAmount,
    CustomerReportRow,
    DashboardMetrics,
    CREDIT,
)
from khata.domain.ledger import summarize, validate_transaction
from khata.domain.inventory import stock_status, IN_STOCK, LOW_STOCK_THRESHOLD
from khata.domain.status import OVERDUE
from khata.utils.date_utils import to_utc, month_start, previous_month_start

DAILY_SALES_DAYS = 14
TOP_PRODUCTS_LIMIT = 5
TOP_CUSTOMERS_LIMIT = 10
MONTH_END_REMINDER_DAY = 25

UNKNOWN = "Unknown"


def format_amount(amount_cents: int, currency: str = "Rs.") -> str:
    """Render minor units without going through float, e.g. 1500050 -> 'Rs. 15,000.50'"""
    sign = "-" if amount_cents < 0 else ""
    major, minor = divmod(abs(amount_cents), 100)
    return f"{sign}{currency} {major:,}.{minor:02d}"


def daily_sales(transactions: Iterable[Transaction], days: int = DAILY_SALES_DAYS) -> List[DailySales]:
    """Credits summed per calendar day (UTC), most recent `days` days that had sales"""
    by_day: Dict[date, int] = defaultdict(int)
    for txn in transactions:
        validate_transaction(txn)
        if txn.type == CREDIT:
            by_day[to_utc(txn.created_at).date()] += txn.amount_cents

    ordered = [DailySales(day=d, amount_cents=by_day[d]) for d in sorted(by_day)]
    return ordered[-days:]


def top_products(
    transactions: Iterable[Transaction],
    products_by_id: Mapping[str, Product],
    limit: int = TOP_PRODUCTS_LIMIT,
) -> List[NamedAmount]:
    """Products ranked by credited (sold) amount"""
    sales: Dict[str, int] = defaultdict(int)
    for txn in transactions:
        validate_transaction(txn)
        if txn.type != CREDIT or txn.product_id is None:
            continue
        product = products_by_id.get(txn.product_id)
        sales[product.name if product else UNKNOWN] += txn.amount_cents

    ranked = sorted(sales.items(), key=lambda item: item[1], reverse=True)
    return [NamedAmount(name=name, amount_cents=amount) for name, amount in ranked[:limit]]


def customer_breakdown(
    transactions: Iterable[Transaction],
    customer_names: Mapping[str, str],
    limit: int = TOP_CUSTOMERS_LIMIT,
) -> List[CustomerReportRow]:
    """Per-customer credits, debits and balance within the report range, highest balance first"""
    credits: Dict[str, int] = defaultdict(int)
    debits: Dict[str, int] = defaultdict(int)
    for txn in transactions:
        validate_transaction(txn)
        if txn.type == CREDIT:
            credits[txn.customer_id] += txn.amount_cents
        else:
            debits[txn.customer_id] += txn.amount_cents

    rows = [
        CustomerReportRow(
            name=customer_names.get(customer_id, UNKNOWN),
            credits_cents=credits[customer_id],
            debits_cents=debits[customer_id],
            balance_cents=credits[customer_id] - debits[customer_id],
        )
        for customer_id in set(credits) | set(debits)
    ]
    rows.sort(key=lambda r: (-r.balance_cents, r.name))
    return rows[:limit]


def build_report(
    transactions: Sequence[Transaction],
    customer_names: Mapping[str, str],
    products_by_id: Mapping[str, Product],
) -> Report:
    """
    Aggregate a period's transactions into report sections.

    Callers filter by date range (and optionally customer) first.
    """
    return Report(
        totals=summarize(transactions),
        daily_sales=daily_sales(transactions),
        top_products=top_products(transactions, products_by_id),
        top_customers=customer_breakdown(transactions, customer_names),
    )


def dashboard_metrics(
    transactions: Sequence[Transaction],
    customer_count: int,
    today: date,
) -> DashboardMetrics:
    """
    Headline numbers for the dashboard.

    Sales growth compares credits this calendar month against last month,
    as a percentage rounded to one decimal; 0.0 when last month had no sales.
    """
    totals = summarize(transactions)

    this_month_start = month_start(today)
    last_month_start = previous_month_start(today)
    this_month = 0
    last_month = 0
    for txn in transactions:
        if txn.type != CREDIT:
            continue
        day = to_utc(txn.created_at).date()
        if day >= this_month_start:
            this_month += txn.amount_cents
        elif day >= last_month_start:
            last_month += txn.amount_cents

    growth = round((this_month - last_month) / last_month * 100, 1) if last_month > 0 else 0.0

    return DashboardMetrics(
        total_sales_cents=totals.total_credits_cents,
        total_payments_cents=totals.total_debits_cents,
        pending_amount_cents=totals.net_cents,
        customer_count=customer_count,
        sales_growth_percent=growth,
    )


def build_alerts(
    summaries: Iterable[CustomerSummary],
    products: Iterable[Product],
    today: date,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> List[str]:
    """Human-readable alerts: overdue customers, low stock, month-end report reminder"""
    alerts = []

    overdue = [s for s in summaries if s.status == OVERDUE]
    if overdue:
        overdue_amount = sum(s.balance_cents for s in overdue)
        alerts.append(
            f"{len(overdue)} customers have overdue payments ({format_amount(overdue_amount)} total)"
        )

    low_stock = [p for p in products if stock_status(p.stock_quantity, low_stock_threshold) != IN_STOCK]
    if low_stock:
        alerts.append(f"{len(low_stock)} products are running low on stock")

    if today.day > MONTH_END_REMINDER_DAY:
        alerts.append(f"Monthly report for {today.strftime('%B')} is ready to generate")

    return alerts
