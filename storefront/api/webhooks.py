import hmac
import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Header, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from storefront.core_settings import Settings, get_settings
from storefront.domain.exceptions import AuthException
from storefront.infrastructure.db import get_db
from storefront.infrastructure.shiprocket import ShiprocketClient
from storefront.application.payments import PaymentService
from storefront.application.shipments import ShipmentService
from .deps import get_shiprocket_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

@router.post("/razorpay")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # Signature covers the raw bytes, so the body is read before any parsing
    body = await request.body()
    service = PaymentService(db, settings.RAZORPAY_KEY_SECRET, settings.razorpay_webhook_secret)
    await run_in_threadpool(service.handle_webhook, body, x_razorpay_signature)
    return {"received": True}

@router.post("/shiprocket")
def shiprocket_webhook(
    payload: dict[str, Any] = Body(...),
    x_api_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
    settings: Settings = Depends(get_settings),
):
    expected = settings.SHIPROCKET_WEBHOOK_TOKEN
    if expected:
        if not x_api_key or not hmac.compare_digest(x_api_key, expected):
            raise AuthException()
    else:
        logger.warning("SHIPROCKET_WEBHOOK_TOKEN not set; accepting unauthenticated Shiprocket webhook")
    ShipmentService(db, shiprocket).apply_status_update(payload)
    return {"received": True, "processed": True}
