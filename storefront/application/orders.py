from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging
from storefront.domain.models import Order, OrderItem, OrderStatus, Product
from storefront.domain.exceptions import (
    InsufficientStockException,
    OrderNotFoundException,
    ProductNotFoundException,
    ProviderException,
)
from storefront.infrastructure.razorpay import RazorpayClient, RazorpayError
from .cart import cart_total, merge_lines
from .pagination import paginate
from .schemas import CheckoutRequest, Pagination

logger = logging.getLogger(__name__)

class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def _generate_order_number(self) -> str:
        """Order number in format ORD-YYYY-NNNNN, sequential within the year"""
        year = datetime.utcnow().year
        count = self.db.query(Order).filter(Order.order_number.like(f"ORD-{year}-%")).count()
        return f"ORD-{year}-{(count + 1):05d}"

    def get(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if not order:
            raise OrderNotFoundException(order_id)
        return order

    def search(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Order], Pagination]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Order.customer_name.ilike(pattern),
                Order.customer_email.ilike(pattern),
                Order.razorpay_order_id.ilike(pattern),
            ))
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        return paginate(query, page, limit)

    def list_for_customer(self, email: str) -> list[Order]:
        return (
            self.db.query(Order)
            .filter(func.lower(Order.customer_email) == email.strip().lower())
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        order = self.get(order_id)
        previous = order.status
        order.status = status.value
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Order {order.order_number} status changed by admin",
            extra={"extra_fields": {"order_id": order.id, "from": previous, "to": order.status}},
        )
        return order

class CheckoutService:
    """Builds a pending order from cart lines and opens the matching Razorpay order."""

    def __init__(self, db: Session, razorpay: RazorpayClient, currency: str = "INR"):
        self.db = db
        self.razorpay = razorpay
        self.currency = currency

    def _priced_items(self, data: CheckoutRequest) -> list[OrderItem]:
        items = []
        for line in merge_lines(data.items):
            product = self.db.get(Product, line.product_id)
            if not product or not product.is_published:
                raise ProductNotFoundException(line.product_id)
            if product.stock < line.qty:
                raise InsufficientStockException(product.title, requested=line.qty, available=product.stock)
            # Price always comes from the catalog, never from the client
            items.append(OrderItem(product_id=product.id, title=product.title, price=product.price, qty=line.qty))
        return items

    def create(self, data: CheckoutRequest) -> Order:
        items = self._priced_items(data)
        customer = data.customer
        order = Order(
            order_number=OrderService(self.db)._generate_order_number(),
            amount=cart_total(items),
            currency=self.currency,
            status=OrderStatus.PENDING.value,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            address_street=customer.address.street,
            address_city=customer.address.city,
            address_state=customer.address.state,
            address_zip_code=customer.address.zip_code,
            address_country=customer.address.country,
            items=items,
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)

        # A gateway failure leaves the pending order behind without a gateway reference
        try:
            gateway_order = self.razorpay.create_order(
                amount=order.amount,
                currency=order.currency,
                receipt=f"receipt_{order.id}",
                payment_capture=1,
            )
        except RazorpayError as e:
            logger.error(
                f"Razorpay order creation failed for {order.order_number}",
                extra={"extra_fields": {"order_id": order.id, "status_code": e.status_code, "reason": e.message}},
            )
            if e.is_auth_error:
                raise ProviderException(
                    "Payment gateway authentication failed. Please check Razorpay credentials.",
                    details="RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be valid and match your Razorpay account.",
                    status_code=500,
                ) from e
            raise ProviderException("Failed to create payment order", details=e.message) from e

        order.razorpay_order_id = gateway_order["id"]
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Order {order.order_number} created",
            extra={"extra_fields": {"order_id": order.id, "amount": order.amount, "razorpay_order_id": order.razorpay_order_id}},
        )
        return order
