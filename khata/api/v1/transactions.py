"""/v1/transactions - record sales (credit) and payments (debit)"""

import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from khata.api.v1.schemas import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
    TransactionType,
)
from khata.api.v1.converters import transaction_response
from khata.api.dependencies import get_request_id, get_change_feed, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import (
    CustomerRepository,
    ProductRepository,
    TransactionRepository,
    to_domain_transaction,
)
from khata.infrastructure.realtime.feed import ChangeFeed
from khata.infrastructure.observability.metrics import record_transaction, invalid_transaction_counter
from khata.infrastructure.observability.logging import log_transaction_recorded
from khata.domain.models import ChangeEvent, Transaction
from khata.domain.ledger import validate_transaction, compute_balance, summarize
from khata.domain.exceptions import InvalidTransactionError, CustomerNotFoundError, ProductNotFoundError
from khata.utils.date_utils import utc_now

router = APIRouter()


def _resolve_customer(db: Session, customer_id: str) -> uuid.UUID:
    customer_uuid = parse_uuid(customer_id, "customer")
    if not CustomerRepository(db).get_customer(customer_uuid):
        raise CustomerNotFoundError(f"Customer {customer_id} not found")
    return customer_uuid


def _resolve_product(db: Session, product_id: Optional[str]) -> Optional[uuid.UUID]:
    if not product_id:
        return None
    product_uuid = parse_uuid(product_id, "product")
    if not ProductRepository(db).get_product(product_uuid):
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product_uuid


def _load_transaction(db: Session, transaction_id: int):
    db_txn = TransactionRepository(db).get_transaction(transaction_id)
    if not db_txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return db_txn


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    customer_id: Optional[str] = Query(None),
    type: Optional[TransactionType] = Query(None),
    search: Optional[str] = Query(None, description="Match description, customer, product name or SKU"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    """Newest first, with credit/debit totals over the filtered set"""
    records = TransactionRepository(db).list_transactions(
        customer_id=parse_uuid(customer_id, "customer") if customer_id else None,
        type=type,
        start=start,
        end=end,
        search=search,
    )
    totals = summarize(to_domain_transaction(r) for r in records)

    return TransactionListResponse(
        transactions=[transaction_response(r) for r in records],
        total_credits_cents=totals.total_credits_cents,
        total_debits_cents=totals.total_debits_cents,
    )


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: TransactionCreate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """
    Record a credit (sale on account) or debit (payment received).

    Flow:
    1. Resolve customer and optional product
    2. Validate amount/type through the ledger engine
    3. Persist and commit
    4. Publish change event, record metrics and log the new balance
    """
    request_id = get_request_id(request)

    try:
        customer_uuid = _resolve_customer(db, body.customer_id)
        product_uuid = _resolve_product(db, body.product_id)

        validate_transaction(
            Transaction(
                id=0,
                customer_id=str(customer_uuid),
                type=body.type,
                amount_cents=body.amount_cents,
                created_at=body.created_at or utc_now(),
            )
        )

        repo = TransactionRepository(db)
        db_txn = repo.create_transaction(
            customer_id=customer_uuid,
            type=body.type,
            amount_cents=body.amount_cents,
            description=body.description,
            product_id=product_uuid,
            created_at=body.created_at,
        )
        db.commit()
        balance = compute_balance(repo.ledger_for_customer(customer_uuid))

    except HTTPException:
        db.rollback()
        raise

    except CustomerNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ProductNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidTransactionError as e:
        invalid_transaction_counter.inc()
        db.rollback()
        logging.warning(f"Invalid transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = transaction_response(db_txn)
    record_transaction(response.type, response.amount_cents)
    log_transaction_recorded(request_id, response.id, response.customer_id, response.type, response.amount_cents, balance)
    feed.publish(ChangeEvent(table="transactions", kind="insert", record=response.model_dump(mode="json")))
    return response


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    return transaction_response(_load_transaction(db, transaction_id))


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    body: TransactionUpdate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    request_id = get_request_id(request)
    db_txn = _load_transaction(db, transaction_id)
    # Only description and product may be cleared
    fields = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("description", "product_id")
    }

    try:
        if "product_id" in fields:
            fields["product_id"] = _resolve_product(db, fields["product_id"])

        validate_transaction(
            Transaction(
                id=db_txn.id,
                customer_id=str(db_txn.customer_id),
                type=fields.get("type", db_txn.type),
                amount_cents=fields.get("amount_cents", db_txn.amount_cents),
                created_at=fields.get("created_at") or db_txn.created_at,
            )
        )

        TransactionRepository(db).update_transaction(db_txn, **fields)
        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except ProductNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidTransactionError as e:
        invalid_transaction_counter.inc()
        db.rollback()
        logging.warning(f"Invalid transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = transaction_response(db_txn)
    feed.publish(ChangeEvent(table="transactions", kind="update", record=response.model_dump(mode="json")))
    return response


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    db_txn = _load_transaction(db, transaction_id)
    try:
        TransactionRepository(db).delete_transaction(db_txn)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to delete transaction: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    feed.publish(ChangeEvent(table="transactions", kind="delete", record={"id": transaction_id}))
    return Response(status_code=204)
