"""Customer status classification for dashboard views"""

import math
from datetime import datetime
from typing import Iterable, List, Optional
from khata.domain.models import Customer, CustomerSummary, Transaction
from khata.domain.ledger import compute_balance
from khata.utils.date_utils import to_utc

OVERDUE_THRESHOLD_DAYS = 30

ACTIVE = "active"
PENDING = "pending"
OVERDUE = "overdue"

SECONDS_PER_DAY = 60 * 60 * 24


def days_since(last_transaction_at: Optional[datetime], now: datetime) -> float:
    """Fractional days since the last transaction; infinity if there is none"""
    if last_transaction_at is None:
        return math.inf
    delta = to_utc(now) - to_utc(last_transaction_at)
    return delta.total_seconds() / SECONDS_PER_DAY


def classify_customer_status(
    balance_cents: int,
    days_since_last_transaction: float,
    threshold_days: int = OVERDUE_THRESHOLD_DAYS,
) -> str:
    """
    Classify a customer from balance and payment recency.

    - overdue: money owed and no activity for more than threshold_days
      (a customer who never transacted counts as infinitely inactive)
    - pending: money owed, activity within threshold_days
    - active: settled or in credit
    """
    if balance_cents <= 0:
        return ACTIVE
    if days_since_last_transaction > threshold_days:
        return OVERDUE
    return PENDING


def summarize_customer(
    customer: Customer,
    transactions: Iterable[Transaction],
    now: datetime,
    threshold_days: int = OVERDUE_THRESHOLD_DAYS,
) -> CustomerSummary:
    """Derive balance, last activity and status for one customer"""
    txns = list(transactions)
    balance = compute_balance(txns)
    last_at = max((t.created_at for t in txns), key=to_utc, default=None)
    status = classify_customer_status(balance, days_since(last_at, now), threshold_days)

    return CustomerSummary(
        customer=customer,
        balance_cents=balance,
        status=status,
        last_transaction_at=last_at,
    )


def top_customers(summaries: Iterable[CustomerSummary], limit: int = 5) -> List[CustomerSummary]:
    """Largest absolute balances first (big debtors and big creditors alike)"""
    return sorted(summaries, key=lambda s: abs(s.balance_cents), reverse=True)[:limit]
