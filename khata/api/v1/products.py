"""/v1/products - inventory with stock status"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from khata.api.v1.schemas import ProductCreate, ProductUpdate, ProductResponse, StockStatus, UserPreferences
from khata.api.v1.converters import product_response
from khata.api.dependencies import get_request_id, get_change_feed, get_preferences, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import ProductRepository, to_domain_product
from khata.infrastructure.realtime.feed import ChangeFeed
from khata.domain.models import ChangeEvent
from khata.domain.inventory import filter_by_stock_status

router = APIRouter()


def _load_product(db: Session, product_id: str):
    db_product = ProductRepository(db).get_product(parse_uuid(product_id, "product"))
    if not db_product:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product


@router.get("/products", response_model=List[ProductResponse])
def list_products(
    search: Optional[str] = Query(None, description="Match name, description or SKU"),
    stock_status: Optional[StockStatus] = Query(None),
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    threshold = preferences.low_stock_threshold
    records = ProductRepository(db).list_products(search=search)
    if stock_status:
        keep = {p.id for p in filter_by_stock_status((to_domain_product(r) for r in records), stock_status, threshold)}
        records = [r for r in records if str(r.id) in keep]
    return [product_response(r, threshold) for r in records]


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    body: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    preferences: UserPreferences = Depends(get_preferences),
):
    try:
        db_product = ProductRepository(db).create_product(**body.model_dump())
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create product: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = product_response(db_product, preferences.low_stock_threshold)
    feed.publish(ChangeEvent(table="products", kind="insert", record=response.model_dump(mode="json")))
    return response


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    preferences: UserPreferences = Depends(get_preferences),
):
    return product_response(_load_product(db, product_id), preferences.low_stock_threshold)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    body: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    preferences: UserPreferences = Depends(get_preferences),
):
    db_product = _load_product(db, product_id)
    fields = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("sku", "category", "description")
    }
    try:
        ProductRepository(db).update_product(db_product, **fields)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to update product: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = product_response(db_product, preferences.low_stock_threshold)
    feed.publish(ChangeEvent(table="products", kind="update", record=response.model_dump(mode="json")))
    return response


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    db_product = _load_product(db, product_id)
    record_id = str(db_product.id)
    try:
        ProductRepository(db).delete_product(db_product)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to delete product: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    feed.publish(ChangeEvent(table="products", kind="delete", record={"id": record_id}))
    return Response(status_code=204)
