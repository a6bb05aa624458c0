import json
import logging
from sqlalchemy.orm import Session
from storefront.domain.models import Order, OrderStatus
from storefront.domain.exceptions import (
    InvalidSignatureException,
    MissingSignatureException,
    OrderNotFoundException,
    PaymentException,
)
from storefront.infrastructure.razorpay import verify_payment_signature, verify_webhook_signature
from .schemas import PaymentVerifyRequest

logger = logging.getLogger(__name__)

PAYMENT_CAPTURED = "payment.captured"
# Already paid or further along; a late payment never moves these back
SETTLED_STATUSES = {
    OrderStatus.PAID.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.SHIPPED.value,
}

class PaymentService:
    """
    Marks orders paid from either of two sources:

    - the browser posting Razorpay's checkout response (``verify``)
    - Razorpay's ``payment.captured`` webhook (``handle_webhook``)

    Whichever arrives first marks the order ``paid`` (a captured payment also
    revives a ``cancelled`` order); the other finds it already settled and
    changes nothing.
    """

    def __init__(self, db: Session, key_secret: str, webhook_secret: str):
        self.db = db
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret

    def _mark_paid(self, order: Order, payment_id: str, signature: str | None = None) -> bool:
        if order.status in SETTLED_STATUSES:
            return False
        order.razorpay_payment_id = payment_id
        if signature:
            order.razorpay_signature = signature
        order.status = OrderStatus.PAID.value
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Order {order.order_number} marked paid",
            extra={"extra_fields": {"order_id": order.id, "payment_id": payment_id}},
        )
        return True

    def verify(self, data: PaymentVerifyRequest) -> Order:
        if not verify_payment_signature(
            data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature, self.key_secret
        ):
            logger.warning(
                "Payment signature mismatch",
                extra={"extra_fields": {"order_id": data.order_id, "razorpay_order_id": data.razorpay_order_id}},
            )
            raise InvalidSignatureException("Invalid payment signature")

        order = self.db.get(Order, data.order_id)
        if not order:
            raise OrderNotFoundException(data.order_id)
        if order.razorpay_order_id and order.razorpay_order_id != data.razorpay_order_id:
            raise InvalidSignatureException(
                "Payment does not belong to this order",
                details={"order_id": order.id},
            )

        self._mark_paid(order, data.razorpay_payment_id, data.razorpay_signature)
        return order

    def handle_webhook(self, body: bytes, signature: str | None) -> bool:
        """Returns True when the event changed an order."""
        if not signature:
            raise MissingSignatureException()
        if not verify_webhook_signature(body, signature, self.webhook_secret):
            logger.warning("Razorpay webhook signature mismatch")
            raise InvalidSignatureException("Invalid webhook signature", status_code=401)

        try:
            event = json.loads(body)
        except ValueError as e:
            raise PaymentException("Invalid webhook payload") from e

        if not isinstance(event, dict):
            logger.warning("Ignoring Razorpay webhook with non-object payload")
            return False

        event_name = event.get("event")
        if event_name != PAYMENT_CAPTURED:
            logger.info(f"Ignoring Razorpay event {event_name}")
            return False

        payment = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
        gateway_order_id = payment.get("order_id")
        if not gateway_order_id:
            logger.warning("payment.captured event without order_id")
            return False

        order = self.db.query(Order).filter(Order.razorpay_order_id == gateway_order_id).first()
        if not order:
            logger.warning(
                "payment.captured for unknown order",
                extra={"extra_fields": {"razorpay_order_id": gateway_order_id}},
            )
            return False
        return self._mark_paid(order, payment.get("id"))
