from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.core_settings import Settings, get_settings
from storefront.infrastructure.db import get_db
from storefront.infrastructure.razorpay import RazorpayClient
from storefront.application.orders import CheckoutService
from storefront.application.payments import PaymentService
from storefront.application.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from .deps import get_razorpay_client

router = APIRouter(prefix="/checkout", tags=["checkout"])

@router.post("/create-order", response_model=CheckoutResponse)
def create_order(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
    settings: Settings = Depends(get_settings),
):
    """Persist a pending order and open the Razorpay order the browser pays against."""
    order = CheckoutService(db, razorpay, currency=settings.CURRENCY).create(payload)
    return CheckoutResponse(
        order_id=order.id,
        order_number=order.order_number,
        razorpay_order_id=order.razorpay_order_id,
        amount=order.amount,
        currency=order.currency,
        key_id=razorpay.key_id,
    )

@router.post("/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    payload: PaymentVerifyRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    service = PaymentService(db, settings.RAZORPAY_KEY_SECRET, settings.razorpay_webhook_secret)
    order = service.verify(payload)
    return PaymentVerifyResponse(success=True, order_id=order.id)
