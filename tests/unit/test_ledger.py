"""Unit tests for the ledger balance engine"""

import math
import random
import pytest
from datetime import timedelta
from khata.domain.ledger import (
    compute_balance,
    compute_running_ledger,
    summarize,
    signed_amount,
    sort_for_ledger,
    validate_transaction,
)
from khata.domain.exceptions import InvalidTransactionError
from khata.domain.models import Transaction


def test_compute_balance_empty():
    assert compute_balance([]) == 0


def test_compute_balance_credits_minus_debits(sample_transactions):
    """15000 - 8000 + 12000"""
    assert compute_balance(sample_transactions) == 19000


def test_compute_balance_matches_signed_sum(make_txn):
    txns = [make_txn(i, "credit" if i % 3 else "debit", 125 * i + 7, day=i) for i in range(1, 30)]
    expected = sum(t.amount_cents if t.type == "credit" else -t.amount_cents for t in txns)
    assert compute_balance(txns) == expected


def test_compute_balance_order_independent(sample_transactions):
    shuffled = list(sample_transactions)
    random.Random(7).shuffle(shuffled)
    assert compute_balance(shuffled) == compute_balance(sample_transactions)
    assert compute_balance(reversed(sample_transactions)) == 19000


def test_compute_balance_overpaid_is_negative(make_txn):
    assert compute_balance([make_txn(1, "debit", 5000)]) == -5000


def test_compute_balance_preserves_minor_units(make_txn):
    """Paisa-level amounts never drift (0.1 + 0.2 style float errors)"""
    txns = [make_txn(i, "credit", 10, day=i) for i in range(10)] + [make_txn(99, "debit", 20, day=20)]
    assert compute_balance(txns) == 80


def test_running_ledger_statement_scenario(sample_transactions):
    ledger = compute_running_ledger(sample_transactions)

    assert [e.running_balance_cents for e in ledger] == [15000, 7000, 19000]
    assert [e.transaction.id for e in ledger] == [1, 2, 3]


def test_running_ledger_reconciles_with_balance(make_txn):
    txns = [make_txn(i, "debit" if i % 4 == 0 else "credit", 1000 + i, day=i) for i in range(1, 20)]
    ledger = compute_running_ledger(txns)

    assert len(ledger) == len(txns)
    assert ledger[-1].running_balance_cents == compute_balance(txns)


def test_running_ledger_steps_by_signed_amount(sample_transactions):
    ledger = compute_running_ledger(sample_transactions)

    assert ledger[0].running_balance_cents == signed_amount(sample_transactions[0])
    for prev, curr in zip(ledger, ledger[1:]):
        assert curr.running_balance_cents - prev.running_balance_cents == signed_amount(curr.transaction)


def test_running_ledger_empty():
    assert compute_running_ledger([]) == []


def test_running_ledger_does_not_resort(make_txn):
    """Input order is authoritative, even when timestamps disagree"""
    txns = [make_txn(1, "debit", 500, day=5), make_txn(2, "credit", 1000, day=1)]
    assert [e.running_balance_cents for e in compute_running_ledger(txns)] == [-500, 500]


def test_running_ledger_with_opening_balance(sample_transactions):
    ledger = compute_running_ledger(sample_transactions, opening_balance_cents=2500)
    assert [e.running_balance_cents for e in ledger] == [17500, 9500, 21500]


def test_computations_are_idempotent(sample_transactions):
    assert compute_balance(sample_transactions) == compute_balance(sample_transactions)
    assert compute_running_ledger(sample_transactions) == compute_running_ledger(sample_transactions)


def test_summarize_totals(sample_transactions):
    totals = summarize(sample_transactions)

    assert totals.total_credits_cents == 27000
    assert totals.total_debits_cents == 8000
    assert totals.net_cents == 19000
    assert totals.transaction_count == 3


def test_sort_for_ledger_stable_on_ties(make_txn):
    txns = [
        make_txn(10, "credit", 100, day=2),
        make_txn(11, "debit", 50, day=1),
        make_txn(12, "credit", 70, day=2),
    ]
    assert [t.id for t in sort_for_ledger(txns)] == [11, 10, 12]


def test_sort_for_ledger_mixes_naive_and_aware_timestamps(make_txn):
    aware = make_txn(20, "credit", 100, day=1)
    # Naive values read back from SQLite are taken as UTC
    naive = Transaction(
        id=21,
        customer_id="cust-1",
        type="debit",
        amount_cents=40,
        created_at=aware.created_at.replace(tzinfo=None) - timedelta(hours=1),
    )
    assert [t.id for t in sort_for_ledger([aware, naive])] == [21, 20]


@pytest.mark.parametrize("amount", [10.5, math.nan, math.inf, True, "100", None])
def test_validate_rejects_non_integer_amounts(make_txn, amount):
    with pytest.raises(InvalidTransactionError):
        validate_transaction(make_txn(1, "credit", amount))


def test_validate_rejects_negative_amount(make_txn):
    with pytest.raises(InvalidTransactionError) as exc_info:
        validate_transaction(make_txn(7, "debit", -1))
    assert exc_info.value.transaction_id == 7


def test_validate_rejects_unknown_type(make_txn):
    with pytest.raises(InvalidTransactionError):
        validate_transaction(make_txn(1, "refund", 100))


def test_balance_fails_fast_on_bad_record(sample_transactions, make_txn):
    with pytest.raises(InvalidTransactionError):
        compute_balance(sample_transactions + [make_txn(4, "credit", math.nan)])


def test_zero_amount_is_valid(make_txn):
    assert compute_balance([make_txn(1, "credit", 0)]) == 0
