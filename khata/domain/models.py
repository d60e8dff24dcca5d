"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

CREDIT = "credit"
DEBIT = "debit"
TRANSACTION_TYPES = (CREDIT, DEBIT)


@dataclass(frozen=True)
class Transaction:
    """Credit (sale) or debit (payment) recorded against a customer"""

    id: int
    customer_id: str
    type: str  # "credit" or "debit"
    amount_cents: int
    created_at: datetime
    description: Optional[str] = None
    product_id: Optional[str] = None


@dataclass(frozen=True)
class Customer:
    """Shop customer"""

    id: str
    name: str
    created_at: datetime
    phone: Optional[str] = None
    cnic: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class Product:
    """Inventory item"""

    id: str
    name: str
    price_cents: int
    stock_quantity: int
    sku: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class LedgerEntry:
    """Transaction paired with the balance immediately after it"""

    transaction: Transaction
    running_balance_cents: int


@dataclass
class LedgerTotals:
    """Credit/debit totals over a set of transactions"""

    total_credits_cents: int
    total_debits_cents: int
    net_cents: int
    transaction_count: int


@dataclass
class CustomerSummary:
    """Customer with derived balance and status"""

    customer: Customer
    balance_cents: int
    status: str  # "active" | "pending" | "overdue"
    last_transaction_at: Optional[datetime] = None


@dataclass
class Statement:
    """Customer account statement for a period"""

    customer: Customer
    period_start: datetime
    period_end: datetime
    opening_balance_cents: int
    closing_balance_cents: int
    current_balance_cents: int
    total_credits_cents: int
    total_debits_cents: int
    entries: List[LedgerEntry] = field(default_factory=list)


@dataclass
class DailySales:
    day: date
    amount_cents: int


@dataclass
class NamedAmount:
    """Label/amount pair used for top-N report rows"""

    name: str
    amount_cents: int


@dataclass
class CustomerReportRow:
    name: str
    credits_cents: int
    debits_cents: int
    balance_cents: int


@dataclass
class Report:
    """Aggregated business report for a date range"""

    totals: LedgerTotals
    daily_sales: List[DailySales]
    top_products: List[NamedAmount]
    top_customers: List[CustomerReportRow]


@dataclass
class DashboardMetrics:
    total_sales_cents: int
    total_payments_cents: int
    pending_amount_cents: int
    customer_count: int
    sales_growth_percent: float


@dataclass(frozen=True)
class ChangeEvent:
    """Single insert/update/delete delivered by the change feed"""

    table: str
    kind: str  # "insert" | "update" | "delete"
    record: Dict
