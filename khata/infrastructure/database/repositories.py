"""Data access layer for ledger entities"""

import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from khata.infrastructure.database.models import (
    CustomerRecord,
    ProductRecord,
    TransactionRecord,
    NotificationRecord,
    AllowedEmailRecord,
    UserRoleRecord,
    UserPreferencesRecord,
)
from khata.domain.models import Customer, Product, Transaction
from khata.domain.exceptions import DuplicateEntryError
from khata.utils.date_utils import to_utc


def to_domain_customer(record: CustomerRecord) -> Customer:
    return Customer(
        id=str(record.id),
        name=record.name,
        created_at=to_utc(record.created_at),
        phone=record.phone,
        cnic=record.cnic,
        address=record.address,
    )


def to_domain_product(record: ProductRecord) -> Product:
    return Product(
        id=str(record.id),
        name=record.name,
        price_cents=record.price_cents,
        stock_quantity=record.stock_quantity,
        sku=record.sku,
        category=record.category,
    )


def to_domain_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        customer_id=str(record.customer_id),
        type=record.type,
        amount_cents=record.amount_cents,
        created_at=to_utc(record.created_at),
        description=record.description,
        product_id=str(record.product_id) if record.product_id else None,
    )


def _apply_fields(record, fields: dict) -> None:
    for name, value in fields.items():
        setattr(record, name, value)


class CustomerRepository:
    """Repository for customers"""

    def __init__(self, db: Session):
        self.db = db

    def create_customer(self, name: str, phone=None, cnic=None, address=None) -> CustomerRecord:
        db_customer = CustomerRecord(name=name, phone=phone, cnic=cnic, address=address)
        self.db.add(db_customer)
        self.db.flush()  # Get ID without committing
        return db_customer

    def get_customer(self, customer_id: uuid.UUID) -> Optional[CustomerRecord]:
        return self.db.query(CustomerRecord).filter(CustomerRecord.id == customer_id).first()

    def list_customers(self, search: Optional[str] = None) -> List[CustomerRecord]:
        """All customers ordered by name, optionally matching name/phone/CNIC"""
        query = self.db.query(CustomerRecord)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    CustomerRecord.name.ilike(pattern),
                    CustomerRecord.phone.ilike(pattern),
                    CustomerRecord.cnic.ilike(pattern),
                )
            )
        return query.order_by(CustomerRecord.name).all()

    def update_customer(self, db_customer: CustomerRecord, **fields) -> CustomerRecord:
        _apply_fields(db_customer, fields)
        self.db.flush()
        return db_customer

    def delete_customer(self, db_customer: CustomerRecord) -> None:
        self.db.delete(db_customer)
        self.db.flush()

    def count_customers(self) -> int:
        return self.db.query(func.count(CustomerRecord.id)).scalar() or 0


class TransactionRepository:
    """Repository for ledger transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        customer_id: uuid.UUID,
        type: str,
        amount_cents: int,
        description: Optional[str] = None,
        product_id: Optional[uuid.UUID] = None,
        created_at: Optional[datetime] = None,
    ) -> TransactionRecord:
        db_txn = TransactionRecord(
            customer_id=customer_id,
            type=type,
            amount_cents=amount_cents,
            description=description,
            product_id=product_id,
        )
        if created_at is not None:
            db_txn.created_at = to_utc(created_at)
        self.db.add(db_txn)
        self.db.flush()
        return db_txn

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        return self.db.query(TransactionRecord).filter(TransactionRecord.id == transaction_id).first()

    def list_transactions(
        self,
        customer_id: Optional[uuid.UUID] = None,
        type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        ascending: bool = False,
        limit: Optional[int] = None,
    ) -> List[TransactionRecord]:
        """
        Fetch transactions with optional filters.

        Ordered by (created_at, id) so equal timestamps fall back to
        insertion order; newest first unless ascending.
        """
        query = self.db.query(TransactionRecord)
        if customer_id is not None:
            query = query.filter(TransactionRecord.customer_id == customer_id)
        if type is not None:
            query = query.filter(TransactionRecord.type == type)
        if start is not None:
            query = query.filter(TransactionRecord.created_at >= to_utc(start))
        if end is not None:
            query = query.filter(TransactionRecord.created_at <= to_utc(end))
        if search:
            pattern = f"%{search}%"
            query = (
                query.outerjoin(CustomerRecord, TransactionRecord.customer_id == CustomerRecord.id)
                .outerjoin(ProductRecord, TransactionRecord.product_id == ProductRecord.id)
                .filter(
                    or_(
                        TransactionRecord.description.ilike(pattern),
                        CustomerRecord.name.ilike(pattern),
                        ProductRecord.name.ilike(pattern),
                        ProductRecord.sku.ilike(pattern),
                    )
                )
            )

        if ascending:
            query = query.order_by(TransactionRecord.created_at.asc(), TransactionRecord.id.asc())
        else:
            query = query.order_by(TransactionRecord.created_at.desc(), TransactionRecord.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def ledger_for_customer(
        self,
        customer_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Customer transactions in ledger order (ascending, insertion order for ties)"""
        records = self.list_transactions(customer_id=customer_id, start=start, end=end, ascending=True)
        return [to_domain_transaction(r) for r in records]

    def history_before(self, customer_id: uuid.UUID, before: datetime) -> List[Transaction]:
        """Transactions strictly before a point in time, for opening balances"""
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.customer_id == customer_id)
            .filter(TransactionRecord.created_at < to_utc(before))
            .order_by(TransactionRecord.created_at.asc(), TransactionRecord.id.asc())
            .all()
        )
        return [to_domain_transaction(r) for r in records]

    def grouped_by_customer(self) -> Dict[str, List[Transaction]]:
        """All transactions bucketed by customer id, each bucket in ledger order"""
        grouped: Dict[str, List[Transaction]] = defaultdict(list)
        for record in self.list_transactions(ascending=True):
            grouped[str(record.customer_id)].append(to_domain_transaction(record))
        return grouped

    def update_transaction(self, db_txn: TransactionRecord, **fields) -> TransactionRecord:
        if fields.get("created_at") is not None:
            fields["created_at"] = to_utc(fields["created_at"])
        _apply_fields(db_txn, fields)
        self.db.flush()
        return db_txn

    def delete_transaction(self, db_txn: TransactionRecord) -> None:
        self.db.delete(db_txn)
        self.db.flush()


class ProductRepository:
    """Repository for inventory products"""

    def __init__(self, db: Session):
        self.db = db

    def create_product(self, **fields) -> ProductRecord:
        db_product = ProductRecord(**fields)
        self.db.add(db_product)
        self.db.flush()
        return db_product

    def get_product(self, product_id: uuid.UUID) -> Optional[ProductRecord]:
        return self.db.query(ProductRecord).filter(ProductRecord.id == product_id).first()

    def list_products(self, search: Optional[str] = None) -> List[ProductRecord]:
        query = self.db.query(ProductRecord)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    ProductRecord.name.ilike(pattern),
                    ProductRecord.description.ilike(pattern),
                    ProductRecord.sku.ilike(pattern),
                )
            )
        return query.order_by(ProductRecord.name).all()

    def update_product(self, db_product: ProductRecord, **fields) -> ProductRecord:
        _apply_fields(db_product, fields)
        self.db.flush()
        return db_product

    def delete_product(self, db_product: ProductRecord) -> None:
        self.db.delete(db_product)
        self.db.flush()


class NotificationRepository:
    """Repository for notifications"""

    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, **fields) -> NotificationRecord:
        db_notification = NotificationRecord(**fields)
        self.db.add(db_notification)
        self.db.flush()
        return db_notification

    def get_notification(self, notification_id: uuid.UUID) -> Optional[NotificationRecord]:
        return self.db.query(NotificationRecord).filter(NotificationRecord.id == notification_id).first()

    def list_notifications(
        self,
        category: Optional[str] = None,
        unread_only: bool = False,
        search: Optional[str] = None,
    ) -> List[NotificationRecord]:
        query = self.db.query(NotificationRecord)
        if category:
            query = query.filter(NotificationRecord.category == category)
        if unread_only:
            query = query.filter(NotificationRecord.read.is_(False))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(NotificationRecord.title.ilike(pattern), NotificationRecord.message.ilike(pattern))
            )
        return query.order_by(NotificationRecord.created_at.desc()).all()

    def mark_read(self, db_notification: NotificationRecord) -> NotificationRecord:
        db_notification.read = True
        self.db.flush()
        return db_notification

    def mark_all_read(self) -> int:
        """Returns number of notifications flipped to read"""
        updated = (
            self.db.query(NotificationRecord)
            .filter(NotificationRecord.read.is_(False))
            .update({NotificationRecord.read: True}, synchronize_session=False)
        )
        self.db.flush()
        return updated

    def delete_notification(self, db_notification: NotificationRecord) -> None:
        self.db.delete(db_notification)
        self.db.flush()


class AccessRepository:
    """Role grants and the sign-up allow list"""

    def __init__(self, db: Session):
        self.db = db

    def has_role(self, user_id: str, role: str) -> bool:
        return (
            self.db.query(UserRoleRecord)
            .filter(UserRoleRecord.user_id == user_id, UserRoleRecord.role == role)
            .first()
            is not None
        )

    def roles_for(self, user_id: str) -> List[str]:
        rows = self.db.query(UserRoleRecord.role).filter(UserRoleRecord.user_id == user_id).all()
        return sorted(r.role for r in rows)

    def grant_role(self, user_id: str, role: str) -> None:
        if not self.has_role(user_id, role):
            self.db.add(UserRoleRecord(user_id=user_id, role=role))
            self.db.flush()

    def list_allowed_emails(self) -> List[AllowedEmailRecord]:
        return self.db.query(AllowedEmailRecord).order_by(AllowedEmailRecord.created_at.desc()).all()

    def add_allowed_email(self, email: str) -> AllowedEmailRecord:
        """
        Raises:
            DuplicateEntryError: If the (lower-cased) email is already allowed
        """
        normalized = email.strip().lower()
        if self.db.query(AllowedEmailRecord).filter(AllowedEmailRecord.email == normalized).first():
            raise DuplicateEntryError(f"{normalized} is already allowed")

        db_email = AllowedEmailRecord(email=normalized)
        self.db.add(db_email)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateEntryError(f"{normalized} is already allowed") from e
        return db_email

    def get_allowed_email(self, email_id: uuid.UUID) -> Optional[AllowedEmailRecord]:
        return self.db.query(AllowedEmailRecord).filter(AllowedEmailRecord.id == email_id).first()

    def delete_allowed_email(self, db_email: AllowedEmailRecord) -> None:
        self.db.delete(db_email)
        self.db.flush()


class PreferencesRepository:
    """Per-user preference documents"""

    def __init__(self, db: Session):
        self.db = db

    def get_preferences(self, user_id: str) -> Optional[dict]:
        record = self.db.get(UserPreferencesRecord, user_id)
        return dict(record.data) if record else None

    def save_preferences(self, user_id: str, data: dict) -> dict:
        record = self.db.get(UserPreferencesRecord, user_id)
        if record is None:
            record = UserPreferencesRecord(user_id=user_id, data=data)
            self.db.add(record)
        else:
            record.data = data
        self.db.flush()
        return dict(record.data)
