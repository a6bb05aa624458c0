from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from storefront.infrastructure.db import get_db
from storefront.application.catalog import CollectionService, ProductService
from storefront.application.schemas import CollectionDetail, CollectionRead, ProductPage, ProductRead

router = APIRouter(tags=["catalog"])

@router.get("/products", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    collection_id: Optional[int] = None,
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    featured: Optional[bool] = None,
    sort_by: Literal["created_at", "price", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    """Published products only."""
    products, pagination = ProductService(db).list_published(
        page, limit,
        collection_id=collection_id,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"products": products, "pagination": pagination}

@router.get("/products/{slug}", response_model=ProductRead)
def get_product(slug: str, db: Session = Depends(get_db)):
    return ProductService(db).get_published_by_slug(slug)

@router.get("/collections", response_model=list[CollectionRead])
def list_collections(db: Session = Depends(get_db)):
    return CollectionService(db).list_all()

@router.get("/collections/{slug}", response_model=CollectionDetail)
def get_collection(slug: str, db: Session = Depends(get_db)):
    service = CollectionService(db)
    collection = service.get_by_slug(slug)
    return {"collection": collection, "products": service.published_products(collection)}
