"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from khata.config import settings

TransactionType = Literal["credit", "debit"]
CustomerStatus = Literal["active", "pending", "overdue"]
StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]
NotificationType = Literal["info", "success", "warning", "error"]
NotificationCategory = Literal["system", "transaction", "customer", "product", "report"]
NotificationPriority = Literal["low", "medium", "high"]


# Customers


class CustomerCreate(BaseModel):
    """Request body for POST /v1/customers"""

    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=32)
    cnic: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None


class CustomerUpdate(BaseModel):
    """Request body for PUT /v1/customers/{id}; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=32)
    cnic: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None


class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    cnic: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    balance_cents: int = 0
    status: CustomerStatus = "active"
    last_transaction_at: Optional[datetime] = None


class BalanceResponse(BaseModel):
    """Response for GET /v1/customers/{id}/balance"""

    customer_id: str
    balance_cents: int
    side: Literal["Dr", "Cr"]
    status: CustomerStatus
    last_transaction_at: Optional[datetime] = None


# Transactions


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    customer_id: str = Field(..., min_length=1)
    type: TransactionType
    amount_cents: int = Field(..., ge=0, description="Amount in minor units (paisa)")
    description: Optional[str] = None
    product_id: Optional[str] = None
    created_at: Optional[datetime] = Field(None, description="Backdate the entry; defaults to now")


class TransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    amount_cents: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    product_id: Optional[str] = None
    created_at: Optional[datetime] = None


class TransactionResponse(BaseModel):
    id: int
    customer_id: str
    customer_name: Optional[str] = None
    type: TransactionType
    amount_cents: int
    description: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    created_at: datetime


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    total_credits_cents: int
    total_debits_cents: int


# Products


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    category: Optional[str] = None
    description: Optional[str] = None
    price_cents: int = Field(0, ge=0)
    stock_quantity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    category: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)


class ProductResponse(BaseModel):
    id: str
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price_cents: int
    stock_quantity: int
    stock_status: StockStatus
    created_at: datetime


# Statements


class StatementEntrySchema(BaseModel):
    """Single statement line"""

    transaction_id: int
    created_at: datetime
    description: str
    type: TransactionType
    debit_cents: int
    credit_cents: int
    running_balance_cents: int
    side: Literal["Dr", "Cr"]


class StatementResponse(BaseModel):
    """Response for GET /v1/customers/{id}/statement"""

    customer: CustomerResponse
    period_start: datetime
    period_end: datetime
    opening_balance_cents: int
    total_credits_cents: int
    total_debits_cents: int
    closing_balance_cents: int
    current_balance_cents: int
    entries: List[StatementEntrySchema]
    generated_at: datetime


# Reports & dashboard


class TotalsSchema(BaseModel):
    total_sales_cents: int
    total_payments_cents: int
    net_balance_cents: int
    transaction_count: int


class DailySalesSchema(BaseModel):
    day: date
    amount_cents: int


class ProductSalesSchema(BaseModel):
    name: str
    sales_cents: int


class CustomerReportSchema(BaseModel):
    name: str
    credits_cents: int
    debits_cents: int
    balance_cents: int


class ReportResponse(BaseModel):
    """Response for GET /v1/reports"""

    start: datetime
    end: datetime
    customer_id: Optional[str] = None
    totals: TotalsSchema
    daily_sales: List[DailySalesSchema]
    top_products: List[ProductSalesSchema]
    top_customers: List[CustomerReportSchema]


class DashboardMetricsResponse(BaseModel):
    total_sales_cents: int
    total_payments_cents: int
    pending_amount_cents: int
    customer_count: int
    sales_growth_percent: float


class AlertsResponse(BaseModel):
    alerts: List[str]


# Notifications


class NotificationCreate(BaseModel):
    type: NotificationType = "info"
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    category: NotificationCategory = "system"
    priority: NotificationPriority = "medium"


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    category: NotificationCategory
    priority: NotificationPriority
    read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


# Access


class AccessResponse(BaseModel):
    user_id: str
    roles: List[str]
    is_admin: bool


class AllowedEmailCreate(BaseModel):
    email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AllowedEmailResponse(BaseModel):
    id: str
    email: str
    created_at: datetime


# Preferences


class UserPreferences(BaseModel):
    """Per-user preferences; thresholds feed dashboard status and alerts"""

    business_name: str = "Khata Management System"
    business_address: Optional[str] = None
    business_phone: Optional[str] = None
    business_email: Optional[str] = None
    tax_id: Optional[str] = None
    currency: str = Field(default_factory=lambda: settings.default_currency)
    date_format: str = "DD/MM/YYYY"
    time_format: Literal["12-hour", "24-hour"] = "12-hour"
    language: str = "en"
    timezone: str = "Asia/Karachi"
    fiscal_year_start: str = "July"
    email_notifications: bool = True
    sms_notifications: bool = False
    push_notifications: bool = True
    low_stock_alerts: bool = True
    payment_reminders: bool = True
    overdue_threshold_days: int = Field(default_factory=lambda: settings.overdue_threshold_days, ge=1, le=365)
    low_stock_threshold: int = Field(default_factory=lambda: settings.low_stock_threshold, ge=0)
