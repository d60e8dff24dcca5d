"""ORM/domain objects to response schemas"""

from typing import Optional
from khata.api.v1.schemas import (
    CustomerResponse,
    TransactionResponse,
    ProductResponse,
    NotificationResponse,
    AllowedEmailResponse,
)
from khata.domain.inventory import stock_status
from khata.domain.models import CustomerSummary
from khata.infrastructure.database.models import (
    CustomerRecord,
    TransactionRecord,
    ProductRecord,
    NotificationRecord,
    AllowedEmailRecord,
)
from khata.utils.date_utils import to_utc


def customer_response(db_customer: CustomerRecord, summary: Optional[CustomerSummary] = None) -> CustomerResponse:
    response = CustomerResponse(
        id=str(db_customer.id),
        name=db_customer.name,
        phone=db_customer.phone,
        cnic=db_customer.cnic,
        address=db_customer.address,
        created_at=to_utc(db_customer.created_at),
    )
    if summary is not None:
        response.balance_cents = summary.balance_cents
        response.status = summary.status
        response.last_transaction_at = summary.last_transaction_at
    return response


def transaction_response(db_txn: TransactionRecord) -> TransactionResponse:
    return TransactionResponse(
        id=db_txn.id,
        customer_id=str(db_txn.customer_id),
        customer_name=db_txn.customer.name if db_txn.customer else None,
        type=db_txn.type,
        amount_cents=db_txn.amount_cents,
        description=db_txn.description,
        product_id=str(db_txn.product_id) if db_txn.product_id else None,
        product_name=db_txn.product.name if db_txn.product else None,
        created_at=to_utc(db_txn.created_at),
    )


def product_response(db_product: ProductRecord, low_stock_threshold: int) -> ProductResponse:
    return ProductResponse(
        id=str(db_product.id),
        name=db_product.name,
        sku=db_product.sku,
        category=db_product.category,
        description=db_product.description,
        price_cents=db_product.price_cents,
        stock_quantity=db_product.stock_quantity,
        stock_status=stock_status(db_product.stock_quantity, low_stock_threshold),
        created_at=to_utc(db_product.created_at),
    )


def notification_response(db_notification: NotificationRecord) -> NotificationResponse:
    return NotificationResponse(
        id=str(db_notification.id),
        type=db_notification.type,
        title=db_notification.title,
        message=db_notification.message,
        category=db_notification.category,
        priority=db_notification.priority,
        read=db_notification.read,
        created_at=to_utc(db_notification.created_at),
    )


def allowed_email_response(db_email: AllowedEmailRecord) -> AllowedEmailResponse:
    return AllowedEmailResponse(
        id=str(db_email.id),
        email=db_email.email,
        created_at=to_utc(db_email.created_at),
    )
