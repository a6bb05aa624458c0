import re
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from storefront.domain.models import Collection, Product
from storefront.domain.exceptions import (
    CatalogException,
    CollectionInUseException,
    CollectionNotFoundException,
    DuplicateSlugException,
    ProductNotFoundException,
)
from .pagination import paginate
from .schemas import (
    CollectionCreate,
    CollectionUpdate,
    Pagination,
    ProductCreate,
    ProductUpdate,
)

PRODUCT_SORT_FIELDS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "title": Product.title,
}

def generate_slug(text: str) -> str:
    """'Classic Steel 40mm!' -> 'classic-steel-40mm'"""
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")

def _ilike_any(term: str, *columns):
    pattern = f"%{term}%"
    return or_(*(column.ilike(pattern) for column in columns))

class CollectionService:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self):
        return self.db.query(Collection).order_by(Collection.created_at.desc(), Collection.id.desc()).all()

    def search(self, page: int, limit: int, search: Optional[str] = None) -> tuple[list[Collection], Pagination]:
        query = self.db.query(Collection)
        if search:
            query = query.filter(_ilike_any(search, Collection.title, Collection.slug, Collection.description))
        query = query.order_by(Collection.created_at.desc(), Collection.id.desc())
        return paginate(query, page, limit)

    def get(self, collection_id: int) -> Collection:
        collection = self.db.get(Collection, collection_id)
        if not collection:
            raise CollectionNotFoundException(collection_id)
        return collection

    def get_by_slug(self, slug: str) -> Collection:
        collection = self.db.query(Collection).filter(Collection.slug == slug).first()
        if not collection:
            raise CollectionNotFoundException(slug)
        return collection

    def published_products(self, collection: Collection) -> list[Product]:
        return (
            self.db.query(Product)
            .filter(Product.collection_id == collection.id, Product.is_published.is_(True))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    def _ensure_slug_free(self, slug: str, exclude_id: Optional[int] = None):
        query = self.db.query(Collection).filter(Collection.slug == slug)
        if exclude_id is not None:
            query = query.filter(Collection.id != exclude_id)
        if query.first():
            raise DuplicateSlugException("Collection", slug)

    def create(self, data: CollectionCreate) -> Collection:
        payload = data.model_dump()
        payload["slug"] = payload.get("slug") or generate_slug(data.title)
        self._ensure_slug_free(payload["slug"])
        obj = Collection(**payload)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, collection_id: int, data: CollectionUpdate) -> Collection:
        collection = self.get(collection_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if changes.get("slug") and changes["slug"] != collection.slug:
            self._ensure_slug_free(changes["slug"], exclude_id=collection.id)
        for key, value in changes.items():
            setattr(collection, key, value)
        self.db.commit()
        self.db.refresh(collection)
        return collection

    def delete(self, collection_id: int) -> None:
        collection = self.get(collection_id)
        in_use = self.db.query(Product).filter(Product.collection_id == collection.id).count()
        if in_use:
            raise CollectionInUseException(in_use)
        self.db.delete(collection)
        self.db.commit()

class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def list_published(
        self,
        page: int,
        limit: int,
        collection_id: Optional[int] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        featured: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Product], Pagination]:
        query = self.db.query(Product).filter(Product.is_published.is_(True))
        if collection_id is not None:
            query = query.filter(Product.collection_id == collection_id)
        if min_price is not None:
            query = query.filter(Product.price >= min_price)
        if max_price is not None:
            query = query.filter(Product.price <= max_price)
        if featured:
            query = query.filter(Product.featured.is_(True))

        column = PRODUCT_SORT_FIELDS.get(sort_by, Product.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        query = query.order_by(ordering, Product.id.asc() if sort_order == "asc" else Product.id.desc())
        return paginate(query, page, limit)

    def search(self, page: int, limit: int, search: Optional[str] = None) -> tuple[list[Product], Pagination]:
        query = self.db.query(Product)
        if search:
            query = query.filter(_ilike_any(search, Product.title, Product.sku, Product.slug))
        query = query.order_by(Product.created_at.desc(), Product.id.desc())
        return paginate(query, page, limit)

    def get(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if not product:
            raise ProductNotFoundException(product_id)
        return product

    def get_published_by_slug(self, slug: str) -> Product:
        product = (
            self.db.query(Product)
            .filter(Product.slug == slug, Product.is_published.is_(True))
            .first()
        )
        if not product:
            raise ProductNotFoundException(slug)
        return product

    def _ensure_slug_free(self, slug: str, exclude_id: Optional[int] = None):
        query = self.db.query(Product).filter(Product.slug == slug)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise DuplicateSlugException("Product", slug)

    def _ensure_collection(self, collection_id: int):
        # Bad reference in the payload, so 400 rather than 404
        if not self.db.get(Collection, collection_id):
            raise CatalogException("Collection not found", details={"collection_id": collection_id})

    def create(self, data: ProductCreate) -> Product:
        payload = data.model_dump()
        payload["slug"] = payload.get("slug") or generate_slug(data.title)
        self._ensure_slug_free(payload["slug"])
        self._ensure_collection(data.collection_id)
        obj = Product(**payload)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, product_id: int, data: ProductUpdate) -> Product:
        product = self.get(product_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if changes.get("slug") and changes["slug"] != product.slug:
            self._ensure_slug_free(changes["slug"], exclude_id=product.id)
        if "collection_id" in changes:
            self._ensure_collection(changes["collection_id"])
        for key, value in changes.items():
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product_id: int) -> None:
        product = self.get(product_id)
        self.db.delete(product)
        self.db.commit()
