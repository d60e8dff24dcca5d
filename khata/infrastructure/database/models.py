"""SQLAlchemy ORM models for the ledger store"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Integer, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from khata.utils.date_utils import utc_now

Base = declarative_base()


class CustomerRecord(Base):
    """Shop customer"""

    __tablename__ = "customers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    cnic = Column(String(32), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="customer", cascade="all, delete-orphan")


class ProductRecord(Base):
    """Inventory item"""

    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    sku = Column(String(64), nullable=True)
    category = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    price_cents = Column(BigInteger, nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())


class TransactionRecord(Base):
    """Credit/debit entry; integer id doubles as insertion order for timestamp ties"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    type = Column(String(6), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)

    customer = relationship("CustomerRecord", back_populates="transactions")
    product = relationship("ProductRecord")


class NotificationRecord(Base):
    """Notification feed item"""

    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(16), nullable=False, default="info")
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(16), nullable=False, default="system")
    priority = Column(String(8), nullable=False, default="medium")
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())


class AllowedEmailRecord(Base):
    """Email permitted to sign up"""

    __tablename__ = "allowed_emails"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())


class UserRoleRecord(Base):
    """Role grant for an externally authenticated user"""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, index=True)
    role = Column(String(32), nullable=False)


class UserPreferencesRecord(Base):
    """Per-user preferences document"""

    __tablename__ = "user_preferences"

    user_id = Column(Text, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
