"""/v1/dashboard - headline metrics, top customers and alerts"""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from khata.api.v1.schemas import DashboardMetricsResponse, AlertsResponse, CustomerResponse, UserPreferences
from khata.api.v1.converters import customer_response
from khata.api.dependencies import get_preferences
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import (
    CustomerRepository,
    ProductRepository,
    TransactionRepository,
    to_domain_customer,
    to_domain_product,
    to_domain_transaction,
)
from khata.domain.reports import dashboard_metrics, build_alerts
from khata.domain.status import summarize_customer, top_customers
from khata.utils.date_utils import utc_now

router = APIRouter()


def _customer_summaries(db: Session, threshold_days: int):
    """(record, summary) pairs for every customer"""
    grouped = TransactionRepository(db).grouped_by_customer()
    now = utc_now()
    return [
        (c, summarize_customer(to_domain_customer(c), grouped.get(str(c.id), []), now, threshold_days))
        for c in CustomerRepository(db).list_customers()
    ]


@router.get("/dashboard/metrics", response_model=DashboardMetricsResponse)
def get_metrics(db: Session = Depends(get_db)):
    transactions = [to_domain_transaction(r) for r in TransactionRepository(db).list_transactions(ascending=True)]
    metrics = dashboard_metrics(transactions, CustomerRepository(db).count_customers(), utc_now().date())

    return DashboardMetricsResponse(
        total_sales_cents=metrics.total_sales_cents,
        total_payments_cents=metrics.total_payments_cents,
        pending_amount_cents=metrics.pending_amount_cents,
        customer_count=metrics.customer_count,
        sales_growth_percent=metrics.sales_growth_percent,
    )


@router.get("/dashboard/top-customers", response_model=List[CustomerResponse])
def get_top_customers(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    """Customers with the largest absolute balances, with status"""
    pairs = _customer_summaries(db, preferences.overdue_threshold_days)
    records = {str(record.id): record for record, _ in pairs}
    ranked = top_customers((summary for _, summary in pairs), limit=limit)
    return [customer_response(records[s.customer.id], s) for s in ranked]


@router.get("/dashboard/alerts", response_model=AlertsResponse)
def get_alerts(
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    summaries = [summary for _, summary in _customer_summaries(db, preferences.overdue_threshold_days)]
    products = [to_domain_product(p) for p in ProductRepository(db).list_products()] if preferences.low_stock_alerts else []

    alerts = build_alerts(summaries, products, utc_now().date(), preferences.low_stock_threshold)
    return AlertsResponse(alerts=alerts)
