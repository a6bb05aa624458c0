import json
import threading

import httpx
import pytest

from storefront.infrastructure.cache import cache_get
from storefront.infrastructure.shiprocket import (
    TOKEN_CACHE_KEY,
    ShiprocketAuthError,
    ShiprocketClient,
    ShiprocketError,
)
from conftest import FakeVendor


@pytest.fixture
def vendor():
    vendor = FakeVendor()
    vendor.add("POST", "/auth/login", json={"token": "sr-token"})
    return vendor


@pytest.fixture
def sr(settings, vendor):
    return ShiprocketClient(settings, transport=httpx.MockTransport(vendor))


def test_login_caches_token(sr, vendor):
    assert sr.get_auth_token() == "sr-token"
    assert sr.get_auth_token() == "sr-token"
    assert len(vendor.calls("/auth/login")) == 1
    assert cache_get(TOKEN_CACHE_KEY) == "sr-token"
    sent = json.loads(vendor.calls("/auth/login")[0].content)
    assert sent == {"email": "ops@example.com", "password": "shiprocket-pass"}


def test_concurrent_requests_log_in_once(sr, vendor):
    threads = [threading.Thread(target=sr.get_auth_token) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(vendor.calls("/auth/login")) == 1


def test_login_rejected(settings):
    vendor = FakeVendor()
    vendor.add("POST", "/auth/login", status_code=403, json={"message": "Account inactive"})
    sr = ShiprocketClient(settings, transport=httpx.MockTransport(vendor))

    with pytest.raises(ShiprocketAuthError) as exc:
        sr.get_auth_token()
    assert "Account inactive" in exc.value.message
    assert "SHIPROCKET_EMAIL" in exc.value.message
    assert exc.value.status_code == 403
    assert cache_get(TOKEN_CACHE_KEY) is None


def test_missing_credentials(settings):
    sr = ShiprocketClient(settings.model_copy(update={"SHIPROCKET_PASSWORD": "  "}))
    with pytest.raises(ShiprocketAuthError) as exc:
        sr.get_auth_token()
    assert "SHIPROCKET_PASSWORD" in exc.value.message


def test_unauthorized_response_clears_token(sr, vendor):
    vendor.add("GET", "/courier/track/awb/AWB1", status_code=401, json={"message": "Token expired"})
    with pytest.raises(ShiprocketError) as exc:
        sr.get_tracking("AWB1")
    assert exc.value.message == "Shiprocket API error: Token expired"
    assert cache_get(TOKEN_CACHE_KEY) is None

    vendor.add("GET", "/courier/track/awb/AWB1", json={"tracking_data": {}})
    assert sr.get_tracking("AWB1") == {"tracking_data": {}}
    assert len(vendor.calls("/auth/login")) == 2


@pytest.mark.parametrize("body, expected", [
    ({"message": "Invalid data"}, "Invalid data"),
    ({"error": "Bad pincode"}, "Bad pincode"),
    ({"errors": ["a", "b"]}, "a, b"),
    ({"errors": {"pincode": ["is invalid"]}}, "pincode: is invalid"),
])
def test_error_message_shapes(sr, vendor, body, expected):
    vendor.add("POST", "/orders/create/adhoc", status_code=422, json=body)
    with pytest.raises(ShiprocketError) as exc:
        sr.create_shipment({})
    assert exc.value.message == f"Shiprocket API error: {expected}"
    assert exc.value.status_code == 422


def test_check_serviceability_params(sr, vendor):
    vendor.add("GET", "/courier/serviceability/", json={"data": {"available_courier_companies": []}})
    sr.check_serviceability("700016", 1.5)
    params = vendor.calls("/courier/serviceability/")[0].url.params
    assert params["pickup_postcode"] == "560001"
    assert params["delivery_postcode"] == "700016"
    assert params["cod"] == "1"
    assert params["weight"] == "1.5"


def test_check_serviceability_needs_pickup_pincode(settings):
    sr = ShiprocketClient(settings.model_copy(update={"SHIPROCKET_PICKUP_PINCODE": ""}))
    with pytest.raises(ShiprocketError):
        sr.check_serviceability("700016")


def test_pickup_location_falls_back_to_pincode(settings):
    sr = ShiprocketClient(settings.model_copy(update={"SHIPROCKET_PICKUP_LOCATION": None}))
    assert sr.pickup_location == "560001"
