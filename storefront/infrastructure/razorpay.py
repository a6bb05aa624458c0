"""Razorpay REST client and signature helpers."""
import hashlib
import hmac
import logging
from typing import Optional

import httpx

from storefront.core_settings import Settings, get_settings

logger = logging.getLogger(__name__)


class RazorpayError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


def _hmac_sha256(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """Checkout signature: hex HMAC-SHA256 of ``order_id|payment_id`` keyed by the API secret."""
    if not secret or not signature:
        return False
    expected = _hmac_sha256(secret, f"{order_id}|{payment_id}".encode())
    return hmac.compare_digest(expected, signature)


def verify_webhook_signature(body: bytes, signature: str, secret: str) -> bool:
    """Webhook signature: hex HMAC-SHA256 of the raw request body keyed by the webhook secret."""
    if not secret or not signature:
        return False
    return hmac.compare_digest(_hmac_sha256(secret, body), signature)


class RazorpayClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport

    @property
    def key_id(self) -> str:
        return self.settings.RAZORPAY_KEY_ID

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.settings.RAZORPAY_BASE_URL,
            auth=(self.settings.RAZORPAY_KEY_ID, self.settings.RAZORPAY_KEY_SECRET),
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    def create_order(self, amount: int, currency: str, receipt: str, payment_capture: int = 1) -> dict:
        """Open a gateway order for ``amount`` paisa."""
        if not self.settings.RAZORPAY_KEY_ID or not self.settings.RAZORPAY_KEY_SECRET:
            raise RazorpayError("Razorpay credentials not configured", status_code=401)

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": payment_capture,
        }
        try:
            with self._client() as client:
                response = client.post("/orders", json=payload)
        except httpx.HTTPError as e:
            raise RazorpayError(f"Failed to connect to Razorpay: {e}") from e

        if response.status_code >= 400:
            code, message = None, response.reason_phrase
            try:
                error = response.json().get("error", {})
                code = error.get("code")
                message = error.get("description") or message
            except ValueError:
                pass
            logger.error(
                "Razorpay order creation failed",
                extra={"extra_fields": {"status_code": response.status_code, "code": code, "receipt": receipt}},
            )
            raise RazorpayError(message, status_code=response.status_code, code=code)

        return response.json()
