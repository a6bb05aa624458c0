"""
Shiprocket API client (v1 external API).

Tokens from ``/auth/login`` are valid for 240 hours; they are cached
process-wide for 9 days so a cached token never outlives its validity.
"""
import logging
import threading
from typing import Any, Optional

import httpx

from storefront.core_settings import Settings, get_settings
from storefront.infrastructure.cache import cache_delete, cache_get, cache_set

logger = logging.getLogger(__name__)

TOKEN_CACHE_KEY = "shiprocket:auth_token"
TOKEN_CACHE_TTL = 9 * 24 * 60 * 60

# Serializes re-authentication across threads of this process
_token_lock = threading.Lock()


class ShiprocketError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ShiprocketAuthError(ShiprocketError):
    pass


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of Shiprocket's assorted error shapes."""
    try:
        data = response.json()
    except ValueError:
        text = response.text
        return f"{response.reason_phrase}: {text}" if text else response.reason_phrase

    if not isinstance(data, dict):
        return response.reason_phrase
    if data.get("message"):
        return str(data["message"])
    error = data.get("error")
    if error:
        if isinstance(error, str):
            return error
        return error.get("message") or str(error)
    errors = data.get("errors")
    if isinstance(errors, list):
        return ", ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
    if isinstance(errors, dict):
        return "; ".join(
            f"{key}: {', '.join(map(str, value)) if isinstance(value, list) else value}"
            for key, value in errors.items()
        )
    return response.reason_phrase or "Unknown error"


def _auth_guidance(status_code: int) -> str:
    if status_code == 403:
        return " Please verify SHIPROCKET_EMAIL and SHIPROCKET_PASSWORD; the account may need activation."
    if status_code == 401:
        return " Please check the Shiprocket account credentials."
    if status_code >= 500:
        return " Shiprocket API is experiencing issues. Please try again later."
    return ""


class ShiprocketClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.settings.SHIPROCKET_BASE_URL,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    # Authentication

    def get_auth_token(self) -> str:
        token = cache_get(TOKEN_CACHE_KEY)
        if token:
            return token
        with _token_lock:
            # Another thread may have logged in while we waited
            token = cache_get(TOKEN_CACHE_KEY)
            if token:
                return token
            token = self._login()
            cache_set(TOKEN_CACHE_KEY, token, TOKEN_CACHE_TTL)
            return token

    def _login(self) -> str:
        email = self.settings.SHIPROCKET_EMAIL.strip()
        password = self.settings.SHIPROCKET_PASSWORD.strip()
        missing = [name for name, value in (("SHIPROCKET_EMAIL", email), ("SHIPROCKET_PASSWORD", password)) if not value]
        if missing:
            raise ShiprocketAuthError(
                f"Shiprocket credentials not configured. Please set {' and '.join(missing)}."
            )

        try:
            with self._client() as client:
                response = client.post("/auth/login", json={"email": email, "password": password})
        except httpx.HTTPError as e:
            cache_delete(TOKEN_CACHE_KEY)
            raise ShiprocketAuthError(f"Failed to authenticate with Shiprocket: {e}") from e

        if response.status_code >= 400:
            cache_delete(TOKEN_CACHE_KEY)
            message = _error_message(response)
            logger.error(
                "Shiprocket authentication failed",
                extra={"extra_fields": {"status_code": response.status_code, "email": email, "reason": message}},
            )
            raise ShiprocketAuthError(
                f"Shiprocket authentication failed: {message} (Status: {response.status_code})"
                f"{_auth_guidance(response.status_code)}",
                status_code=response.status_code,
            )

        token = response.json().get("token")
        if not token:
            cache_delete(TOKEN_CACHE_KEY)
            raise ShiprocketAuthError("Shiprocket authentication response missing token")
        logger.info("Shiprocket authentication successful")
        return token

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        token = self.get_auth_token()
        headers = {"Authorization": f"Bearer {token}"}
        try:
            with self._client() as client:
                response = client.request(method, endpoint, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ShiprocketError(f"Shiprocket API error: {e}") from e

        if response.status_code == 401:
            # Token revoked or expired early; next call logs in again
            cache_delete(TOKEN_CACHE_KEY)
        if response.status_code >= 400:
            raise ShiprocketError(
                f"Shiprocket API error: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response.json()

    # Endpoints

    def check_serviceability(self, pincode: str, weight: float = 0.5) -> dict:
        pickup_pincode = self.settings.SHIPROCKET_PICKUP_PINCODE
        if not pickup_pincode:
            raise ShiprocketError(
                "Pickup pincode not configured. Please set SHIPROCKET_PICKUP_PINCODE."
            )
        return self._request(
            "GET",
            "/courier/serviceability/",
            params={
                "pickup_postcode": pickup_pincode,
                "delivery_postcode": pincode,
                "cod": 1,
                "weight": weight,
            },
        )

    def create_shipment(self, payload: dict) -> dict:
        return self._request("POST", "/orders/create/adhoc", json=payload)

    def assign_awb(self, shipment_id: int, courier_id: Optional[int] = None) -> dict:
        body: dict = {"shipment_id": shipment_id}
        if courier_id:
            body["courier_id"] = courier_id
        return self._request("POST", "/courier/assign/awb", json=body)

    def schedule_pickup(self, shipment_id: int) -> dict:
        return self._request("POST", "/courier/generate/pickup", json={"shipment_id": [shipment_id]})

    def get_tracking(self, awb_code: str) -> dict:
        return self._request("GET", f"/courier/track/awb/{awb_code}")

    def generate_label(self, shipment_id: int) -> dict:
        return self._request("POST", "/courier/generate/label", json={"shipment_id": [shipment_id]})

    def generate_invoice(self, shipment_id: int) -> dict:
        return self._request("POST", "/orders/print/invoice", json={"shipment_ids": [shipment_id]})

    def tracking_url(self, awb_code: str) -> str:
        return f"{self.settings.SHIPROCKET_TRACKING_URL}{awb_code}"

    def get_pickup_address(self) -> dict:
        s = self.settings
        return {
            "name": s.SHIPROCKET_PICKUP_NAME or s.SHIPROCKET_PICKUP_EMAIL or "Store",
            "email": s.SHIPROCKET_PICKUP_EMAIL,
            "phone": s.SHIPROCKET_PICKUP_PHONE,
            "street": s.SHIPROCKET_PICKUP_STREET,
            "city": s.SHIPROCKET_PICKUP_CITY,
            "state": s.SHIPROCKET_PICKUP_STATE,
            "pincode": s.SHIPROCKET_PICKUP_PINCODE,
            "country": s.SHIPROCKET_PICKUP_COUNTRY,
        }

    @property
    def pickup_location(self) -> str:
        return self.settings.SHIPROCKET_PICKUP_LOCATION or self.settings.SHIPROCKET_PICKUP_PINCODE
