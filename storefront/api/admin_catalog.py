from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from storefront.infrastructure.db import get_db
from storefront.application.catalog import CollectionService, ProductService
from storefront.application.schemas import (
    CollectionCreate,
    CollectionPage,
    CollectionRead,
    CollectionUpdate,
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from .deps import require_admin

router = APIRouter(prefix="/admin", tags=["admin-catalog"], dependencies=[Depends(require_admin)])

@router.get("/products", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    products, pagination = ProductService(db).search(page, limit, search)
    return {"products": products, "pagination": pagination}

@router.post("/products", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create(payload)

@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).get(product_id)

@router.put("/products/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    return ProductService(db).update(product_id, payload)

@router.delete("/products/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).delete(product_id)
    return {"success": True}

@router.get("/collections", response_model=CollectionPage)
def list_collections(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    collections, pagination = CollectionService(db).search(page, limit, search)
    return {"collections": collections, "pagination": pagination}

@router.post("/collections", response_model=CollectionRead, status_code=201)
def create_collection(payload: CollectionCreate, db: Session = Depends(get_db)):
    return CollectionService(db).create(payload)

@router.get("/collections/{collection_id}", response_model=CollectionRead)
def get_collection(collection_id: int, db: Session = Depends(get_db)):
    return CollectionService(db).get(collection_id)

@router.put("/collections/{collection_id}", response_model=CollectionRead)
def update_collection(collection_id: int, payload: CollectionUpdate, db: Session = Depends(get_db)):
    return CollectionService(db).update(collection_id, payload)

@router.delete("/collections/{collection_id}")
def delete_collection(collection_id: int, db: Session = Depends(get_db)):
    CollectionService(db).delete(collection_id)
    return {"success": True}
