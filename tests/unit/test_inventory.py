"""Unit tests for stock classification"""

from khata.domain.models import Product
from khata.domain.inventory import stock_status, filter_by_stock_status, IN_STOCK, LOW_STOCK, OUT_OF_STOCK


def test_stock_status_bands():
    assert stock_status(0) == OUT_OF_STOCK
    assert stock_status(1) == LOW_STOCK
    assert stock_status(10) == LOW_STOCK
    assert stock_status(11) == IN_STOCK


def test_stock_status_custom_threshold():
    assert stock_status(15, threshold=20) == LOW_STOCK
    assert stock_status(5, threshold=3) == IN_STOCK


def test_filter_by_stock_status():
    products = [
        Product(id="p1", name="Shirt", price_cents=1000, stock_quantity=2),
        Product(id="p2", name="Rice", price_cents=1000, stock_quantity=0),
        Product(id="p3", name="Sugar", price_cents=1000, stock_quantity=40),
    ]

    assert [p.id for p in filter_by_stock_status(products, LOW_STOCK)] == ["p1"]
    assert [p.id for p in filter_by_stock_status(products, OUT_OF_STOCK)] == ["p2"]
    # "In stock" filter keeps anything available, low stock included
    assert [p.id for p in filter_by_stock_status(products, IN_STOCK)] == ["p1", "p3"]
