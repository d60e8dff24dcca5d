"""/v1/customers - customer CRUD with derived balance and status"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from khata.api.v1.schemas import CustomerCreate, CustomerUpdate, CustomerResponse, BalanceResponse, UserPreferences
from khata.api.v1.converters import customer_response
from khata.api.dependencies import get_request_id, get_change_feed, get_preferences, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import CustomerRepository, TransactionRepository, to_domain_customer
from khata.infrastructure.realtime.feed import ChangeFeed
from khata.domain.models import ChangeEvent
from khata.domain.status import summarize_customer
from khata.domain.statements import balance_side
from khata.utils.date_utils import utc_now

router = APIRouter()


def _load_customer(db: Session, customer_id: str):
    db_customer = CustomerRepository(db).get_customer(parse_uuid(customer_id, "customer"))
    if not db_customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return db_customer


@router.get("/customers", response_model=List[CustomerResponse])
def list_customers(
    search: Optional[str] = Query(None, description="Match name, phone or CNIC"),
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    """List customers by name with their current balance and status"""
    customers = CustomerRepository(db).list_customers(search=search)
    grouped = TransactionRepository(db).grouped_by_customer()
    now = utc_now()

    return [
        customer_response(
            c,
            summarize_customer(
                to_domain_customer(c),
                grouped.get(str(c.id), []),
                now,
                preferences.overdue_threshold_days,
            ),
        )
        for c in customers
    ]


@router.post("/customers", response_model=CustomerResponse, status_code=201)
def create_customer(
    body: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    request_id = get_request_id(request)
    try:
        db_customer = CustomerRepository(db).create_customer(**body.model_dump())
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create customer: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = customer_response(db_customer)
    feed.publish(ChangeEvent(table="customers", kind="insert", record=response.model_dump(mode="json")))
    logging.info("Customer created", extra={"request_id": request_id, "customer_id": response.id})
    return response


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    db_customer = _load_customer(db, customer_id)
    history = TransactionRepository(db).ledger_for_customer(db_customer.id)
    summary = summarize_customer(to_domain_customer(db_customer), history, utc_now(), preferences.overdue_threshold_days)
    return customer_response(db_customer, summary)


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    body: CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    preferences: UserPreferences = Depends(get_preferences),
):
    db_customer = _load_customer(db, customer_id)
    fields = body.model_dump(exclude_unset=True)
    if fields.get("name") is None:
        fields.pop("name", None)
    try:
        CustomerRepository(db).update_customer(db_customer, **fields)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to update customer: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    history = TransactionRepository(db).ledger_for_customer(db_customer.id)
    summary = summarize_customer(to_domain_customer(db_customer), history, utc_now(), preferences.overdue_threshold_days)
    response = customer_response(db_customer, summary)
    feed.publish(ChangeEvent(table="customers", kind="update", record=response.model_dump(mode="json")))
    return response


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer(
    customer_id: str,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Delete a customer together with their transactions"""
    db_customer = _load_customer(db, customer_id)
    record_id = str(db_customer.id)
    try:
        CustomerRepository(db).delete_customer(db_customer)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to delete customer: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    feed.publish(ChangeEvent(table="customers", kind="delete", record={"id": record_id}))
    return Response(status_code=204)


@router.get("/customers/{customer_id}/balance", response_model=BalanceResponse)
def get_customer_balance(
    customer_id: str,
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    """Current balance (credits minus debits) with Dr/Cr side and status"""
    db_customer = _load_customer(db, customer_id)
    history = TransactionRepository(db).ledger_for_customer(db_customer.id)
    summary = summarize_customer(to_domain_customer(db_customer), history, utc_now(), preferences.overdue_threshold_days)

    return BalanceResponse(
        customer_id=str(db_customer.id),
        balance_cents=summary.balance_cents,
        side=balance_side(summary.balance_cents),
        status=summary.status,
        last_transaction_at=summary.last_transaction_at,
    )
