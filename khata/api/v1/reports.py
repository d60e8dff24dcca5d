"""GET /v1/reports - sales/payments report for a date range"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from khata.api.v1.schemas import (
    ReportResponse,
    TotalsSchema,
    DailySalesSchema,
    ProductSalesSchema,
    CustomerReportSchema,
)
from khata.api.dependencies import parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import (
    CustomerRepository,
    ProductRepository,
    TransactionRepository,
    to_domain_product,
    to_domain_transaction,
)
from khata.domain.reports import build_report
from khata.utils.date_utils import to_utc, utc_now

router = APIRouter()

DEFAULT_PERIOD_DAYS = 30


@router.get("/reports", response_model=ReportResponse)
def get_report(
    start: Optional[datetime] = Query(None, description="Range start (default: 30 days before end)"),
    end: Optional[datetime] = Query(None, description="Range end (default: now)"),
    customer_id: Optional[str] = Query(None, description="Restrict to one customer"),
    db: Session = Depends(get_db),
):
    """
    Aggregate transactions in a date range.

    Returns:
        Totals, daily sales series, top products and per-customer balances
    """
    range_end = to_utc(end) if end else utc_now()
    range_start = to_utc(start) if start else range_end - timedelta(days=DEFAULT_PERIOD_DAYS)
    if range_start > range_end:
        raise HTTPException(status_code=400, detail="start must not be after end")

    records = TransactionRepository(db).list_transactions(
        customer_id=parse_uuid(customer_id, "customer") if customer_id else None,
        start=range_start,
        end=range_end,
        ascending=True,
    )
    customer_names = {str(c.id): c.name for c in CustomerRepository(db).list_customers()}
    products = {str(p.id): to_domain_product(p) for p in ProductRepository(db).list_products()}

    report = build_report([to_domain_transaction(r) for r in records], customer_names, products)

    return ReportResponse(
        start=range_start,
        end=range_end,
        customer_id=customer_id,
        totals=TotalsSchema(
            total_sales_cents=report.totals.total_credits_cents,
            total_payments_cents=report.totals.total_debits_cents,
            net_balance_cents=report.totals.net_cents,
            transaction_count=report.totals.transaction_count,
        ),
        daily_sales=[DailySalesSchema(day=d.day, amount_cents=d.amount_cents) for d in report.daily_sales],
        top_products=[ProductSalesSchema(name=p.name, sales_cents=p.amount_cents) for p in report.top_products],
        top_customers=[
            CustomerReportSchema(
                name=row.name,
                credits_cents=row.credits_cents,
                debits_cents=row.debits_cents,
                balance_cents=row.balance_cents,
            )
            for row in report.top_customers
        ],
    )
