"""Stock level classification"""

from typing import Iterable, List
from khata.domain.models import Product

LOW_STOCK_THRESHOLD = 10

IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"
STOCK_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK)


def stock_status(quantity: int, threshold: int = LOW_STOCK_THRESHOLD) -> str:
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= threshold:
        return LOW_STOCK
    return IN_STOCK


def filter_by_stock_status(
    products: Iterable[Product],
    status: str,
    threshold: int = LOW_STOCK_THRESHOLD,
) -> List[Product]:
    """Keep products in the given stock band; "in_stock" means anything above zero"""
    if status == IN_STOCK:
        return [p for p in products if p.stock_quantity > 0]
    return [p for p in products if stock_status(p.stock_quantity, threshold) == status]
