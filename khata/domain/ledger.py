"""Ledger balance engine - balance and running-balance computation"""

from typing import Iterable, List, Sequence
from khata.domain.models import Transaction, LedgerEntry, LedgerTotals, CREDIT, TRANSACTION_TYPES
from khata.domain.exceptions import InvalidTransactionError
from khata.utils.date_utils import to_utc


def validate_transaction(txn: Transaction) -> None:
    """
    Reject records that would corrupt balance arithmetic.

    Amounts are integer minor units; floats (including NaN/inf) and
    bools are rejected rather than coerced.

    Raises:
        InvalidTransactionError: On bad amount or unknown type
    """
    amount = txn.amount_cents
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidTransactionError(
            f"Transaction {txn.id}: amount must be an integer number of minor units, got {amount!r}",
            transaction_id=txn.id,
        )
    if amount < 0:
        raise InvalidTransactionError(
            f"Transaction {txn.id}: amount must be non-negative, got {amount}",
            transaction_id=txn.id,
        )
    if txn.type not in TRANSACTION_TYPES:
        raise InvalidTransactionError(
            f"Transaction {txn.id}: type must be 'credit' or 'debit', got {txn.type!r}",
            transaction_id=txn.id,
        )


def signed_amount(txn: Transaction) -> int:
    """Credit adds to what the customer owes, debit (payment) subtracts"""
    validate_transaction(txn)
    return txn.amount_cents if txn.type == CREDIT else -txn.amount_cents


def compute_balance(transactions: Iterable[Transaction]) -> int:
    """
    Net balance: sum of credits minus sum of debits.

    Positive means the customer owes money, negative means overpaid.
    Order independent; empty input gives 0.
    """
    return sum(signed_amount(t) for t in transactions)


def compute_running_ledger(
    transactions: Sequence[Transaction],
    opening_balance_cents: int = 0,
) -> List[LedgerEntry]:
    """
    Pair each transaction with the cumulative balance after applying it.

    Input must already be sorted ascending by created_at, stable on input
    order for ties (see sort_for_ledger). Transactions are folded in the
    order given; nothing is re-sorted here.

    With the default opening balance the last entry's running balance equals
    compute_balance(transactions).
    """
    running = opening_balance_cents
    entries = []
    for txn in transactions:
        running += signed_amount(txn)
        entries.append(LedgerEntry(transaction=txn, running_balance_cents=running))
    return entries


def summarize(transactions: Iterable[Transaction]) -> LedgerTotals:
    """Credit and debit totals for statement footers and report cards"""
    credits = 0
    debits = 0
    count = 0
    for txn in transactions:
        validate_transaction(txn)
        if txn.type == CREDIT:
            credits += txn.amount_cents
        else:
            debits += txn.amount_cents
        count += 1

    return LedgerTotals(
        total_credits_cents=credits,
        total_debits_cents=debits,
        net_cents=credits - debits,
        transaction_count=count,
    )


def sort_for_ledger(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Ascending by created_at; sorted() is stable so ties keep input order"""
    return sorted(transactions, key=lambda t: to_utc(t.created_at))
