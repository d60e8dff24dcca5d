"""Customer statement generation"""

from datetime import datetime
from typing import Iterable, Optional, Sequence
from khata.domain.models import Customer, Statement, Transaction
from khata.domain.ledger import compute_balance, compute_running_ledger, summarize
from khata.utils.date_utils import to_utc


def opening_balance(transactions: Iterable[Transaction], period_start: datetime) -> int:
    """Balance carried into a period from everything strictly before period_start"""
    start = to_utc(period_start)
    return compute_balance(t for t in transactions if to_utc(t.created_at) < start)


def build_statement(
    customer: Customer,
    period_transactions: Sequence[Transaction],
    period_start: datetime,
    period_end: datetime,
    opening_balance_cents: int = 0,
    current_balance_cents: Optional[int] = None,
) -> Statement:
    """
    Build a statement from a customer's transactions within a period.

    Args:
        period_transactions: Already filtered to the period and sorted
            ascending by created_at (ties in insertion order)
        opening_balance_cents: Carry-in from before the period
        current_balance_cents: All-time balance; defaults to the closing balance

    Returns:
        Statement with running-balance entries and period totals
    """
    entries = compute_running_ledger(period_transactions, opening_balance_cents)
    totals = summarize(period_transactions)
    closing = entries[-1].running_balance_cents if entries else opening_balance_cents

    return Statement(
        customer=customer,
        period_start=period_start,
        period_end=period_end,
        opening_balance_cents=opening_balance_cents,
        closing_balance_cents=closing,
        current_balance_cents=closing if current_balance_cents is None else current_balance_cents,
        total_credits_cents=totals.total_credits_cents,
        total_debits_cents=totals.total_debits_cents,
        entries=entries,
    )


def balance_side(amount_cents: int) -> str:
    """Dr when the customer owes (or is settled), Cr when in credit"""
    return "Dr" if amount_cents >= 0 else "Cr"
