"""GET /v1/customers/{customer_id}/statement - account statement with running balance"""

import time
from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from khata.api.v1.schemas import StatementResponse, StatementEntrySchema, UserPreferences
from khata.api.v1.converters import customer_response
from khata.api.dependencies import get_request_id, get_preferences, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import CustomerRepository, TransactionRepository, to_domain_customer
from khata.infrastructure.observability.metrics import statement_counter, statement_latency_histogram
from khata.infrastructure.observability.logging import log_statement_generated
from khata.domain.models import CREDIT, LedgerEntry
from khata.domain.statements import build_statement, opening_balance, balance_side
from khata.domain.status import summarize_customer
from khata.utils.date_utils import to_utc, utc_now

router = APIRouter()

DEFAULT_PERIOD_DAYS = 30


def _entry_schema(entry: LedgerEntry) -> StatementEntrySchema:
    txn = entry.transaction
    is_credit = txn.type == CREDIT
    return StatementEntrySchema(
        transaction_id=txn.id,
        created_at=txn.created_at,
        description=txn.description or ("Sale" if is_credit else "Payment"),
        type=txn.type,
        debit_cents=0 if is_credit else txn.amount_cents,
        credit_cents=txn.amount_cents if is_credit else 0,
        running_balance_cents=entry.running_balance_cents,
        side=balance_side(entry.running_balance_cents),
    )


@router.get("/customers/{customer_id}/statement", response_model=StatementResponse)
def get_statement(
    customer_id: str,
    request: Request,
    start: Optional[datetime] = Query(None, description="Period start (default: 30 days before end)"),
    end: Optional[datetime] = Query(None, description="Period end (default: now)"),
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    """
    Generate a customer statement for a period.

    The running balance opens with everything recorded before the period,
    so closing balance at the end of the period matches the ledger.
    """
    start_time = time.time()

    db_customer = CustomerRepository(db).get_customer(parse_uuid(customer_id, "customer"))
    if not db_customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    period_end = to_utc(end) if end else utc_now()
    period_start = to_utc(start) if start else period_end - timedelta(days=DEFAULT_PERIOD_DAYS)
    if period_start > period_end:
        raise HTTPException(status_code=400, detail="start must not be after end")

    with statement_latency_histogram.time():
        repo = TransactionRepository(db)
        carried = opening_balance(repo.history_before(db_customer.id, period_start), period_start)
        period = repo.ledger_for_customer(db_customer.id, start=period_start, end=period_end)
        customer = to_domain_customer(db_customer)
        summary = summarize_customer(
            customer,
            repo.ledger_for_customer(db_customer.id),
            utc_now(),
            preferences.overdue_threshold_days,
        )

        statement = build_statement(
            customer,
            period,
            period_start,
            period_end,
            opening_balance_cents=carried,
            current_balance_cents=summary.balance_cents,
        )

    statement_counter.inc()
    duration_ms = (time.time() - start_time) * 1000
    log_statement_generated(
        get_request_id(request),
        str(db_customer.id),
        len(statement.entries),
        statement.closing_balance_cents,
        duration_ms,
    )

    return StatementResponse(
        customer=customer_response(db_customer, summary),
        period_start=statement.period_start,
        period_end=statement.period_end,
        opening_balance_cents=statement.opening_balance_cents,
        total_credits_cents=statement.total_credits_cents,
        total_debits_cents=statement.total_debits_cents,
        closing_balance_cents=statement.closing_balance_cents,
        current_balance_cents=statement.current_balance_cents,
        entries=[_entry_schema(e) for e in statement.entries],
        generated_at=utc_now(),
    )
