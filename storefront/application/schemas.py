from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Any, Optional
from storefront.domain.models import OrderStatus

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

# Catalog

class CollectionCreate(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    description: str = Field(min_length=1)
    image: str = Field(min_length=1)
    meta: dict[str, Any] = {}

class CollectionUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

class CollectionRead(BaseModel):
    id: int
    title: str
    slug: str
    description: str
    image: str
    meta: dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CollectionPage(BaseModel):
    collections: list[CollectionRead]
    pagination: Pagination

class ProductCreate(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    sku: str = Field(min_length=1)
    # Paisa
    price: int = Field(gt=0)
    currency: str = "INR"
    collection_id: int
    images: list[str] = Field(min_length=1)
    description: str = Field(min_length=1)
    specs: dict[str, Any] = {}
    stock: int = Field(ge=0)
    featured: bool = False
    is_published: bool = False

class ProductUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0)
    currency: Optional[str] = None
    collection_id: Optional[int] = None
    images: Optional[list[str]] = None
    description: Optional[str] = None
    specs: Optional[dict[str, Any]] = None
    stock: Optional[int] = Field(default=None, ge=0)
    featured: Optional[bool] = None
    is_published: Optional[bool] = None

class ProductRead(BaseModel):
    id: int
    title: str
    slug: str
    sku: str
    price: int
    currency: str
    collection_id: int
    images: list[str] = []
    description: str
    specs: dict[str, Any] = {}
    stock: int
    featured: bool
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProductPage(BaseModel):
    products: list[ProductRead]
    pagination: Pagination

class CollectionDetail(BaseModel):
    collection: CollectionRead
    products: list[ProductRead]

# Checkout and orders

class Address(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)

class Customer(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=10)
    address: Address

class CartLine(BaseModel):
    product_id: int
    qty: int = Field(ge=1)

class CheckoutRequest(BaseModel):
    items: list[CartLine] = Field(min_length=1)
    customer: Customer

class CheckoutResponse(BaseModel):
    order_id: int
    order_number: str
    razorpay_order_id: str
    amount: int
    currency: str
    key_id: str

class PaymentVerifyRequest(BaseModel):
    order_id: int
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

class PaymentVerifyResponse(BaseModel):
    success: bool
    order_id: int

class OrderItemRead(BaseModel):
    id: int
    product_id: int
    title: str
    price: int
    qty: int

    class Config:
        from_attributes = True

class CustomerRead(BaseModel):
    name: str
    email: str
    phone: str
    address: Address

class OrderRead(BaseModel):
    id: int
    order_number: str
    items: list[OrderItemRead]
    amount: int
    currency: str
    customer: CustomerRead
    status: str
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    shiprocket_shipment_id: Optional[str] = None
    shiprocket_order_id: Optional[str] = None
    awb_code: Optional[str] = None
    courier_name: Optional[str] = None
    shipping_status: Optional[str] = None
    tracking_url: Optional[str] = None
    pickup_scheduled_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrderPage(BaseModel):
    orders: list[OrderRead]
    pagination: Pagination

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderStatusUpdated(BaseModel):
    success: bool
    status: OrderStatus

# Shipments

class ShipmentCreateRequest(BaseModel):
    # Kilograms and centimetres
    weight: Optional[float] = Field(default=None, gt=0)
    length: Optional[float] = Field(default=None, gt=0)
    breadth: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)

class ShipmentSummary(BaseModel):
    shipment_id: str
    order_id: Optional[str] = None
    awb_code: Optional[str] = None
    courier_name: Optional[str] = None
    status: Optional[str] = None

class ShipmentCreated(BaseModel):
    success: bool
    shipment: ShipmentSummary

class ShipmentRead(BaseModel):
    shipment_id: str
    order_id: Optional[str] = None
    awb_code: Optional[str] = None
    courier_name: Optional[str] = None
    shipping_status: Optional[str] = None
    tracking_url: Optional[str] = None
    pickup_scheduled_date: Optional[datetime] = None

class ShipmentDetail(BaseModel):
    shipment: ShipmentRead
    tracking: Optional[dict[str, Any]] = None

class AssignAWBRequest(BaseModel):
    courier_id: Optional[int] = None

class AWBRead(BaseModel):
    awb_code: str
    courier_name: Optional[str] = None

class AWBAssigned(BaseModel):
    success: bool
    awb: AWBRead

class PickupScheduled(BaseModel):
    success: bool
    message: str
    pickup_scheduled_date: datetime

class LabelGenerated(BaseModel):
    success: bool
    label_url: Optional[str] = None

class InvoiceGenerated(BaseModel):
    success: bool
    invoice_url: Optional[str] = None

class ServiceabilityRead(BaseModel):
    success: bool
    serviceable: bool
    couriers: list[dict[str, Any]]

# Auth

class TokenRequest(BaseModel):
    email: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
