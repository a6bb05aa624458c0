import pytest

from storefront.application.shipments import is_return_to_origin, normalize_status_code, split_name
from storefront.core_settings import get_settings
from storefront.main import app
from conftest import make_order, reload


@pytest.fixture
def shipped_order(db):
    return make_order(db, status="paid", shiprocket_shipment_id="54321")


def push(client, payload, **headers):
    return client.post("/webhooks/shiprocket", json=payload, headers=headers)


def test_status_code_normalization():
    assert normalize_status_code("Picked Up") == "PICKEDUP"
    assert normalize_status_code("out_for_delivery") == "OUTFORDELIVERY"
    assert is_return_to_origin(normalize_status_code("RTO Initiated"))
    assert is_return_to_origin(normalize_status_code("Return To Origin"))
    assert not is_return_to_origin(normalize_status_code("DL"))


def test_split_name():
    assert split_name("Asha Rani Verma") == ("Asha", "Rani Verma")
    assert split_name("Asha") == ("Asha", "")
    assert split_name("") == ("", "")


def test_missing_shipment_id(client):
    resp = push(client, {"status_code": "DL"})
    assert resp.status_code == 400


def test_unknown_shipment(client):
    resp = push(client, {"shipment_id": 1, "status_code": "DL"})
    assert resp.status_code == 404


def test_awb_push_marks_shipped(client, db, shipped_order):
    resp = push(client, {"shipment_id": 54321, "awb": "AWB777", "courier_name": "Bluedart", "current_status": "AWB Assigned"})
    assert resp.status_code == 200
    assert resp.json() == {"received": True, "processed": True}

    order = reload(db, shipped_order)
    assert order.status == "shipped"
    assert order.awb_code == "AWB777"
    assert order.courier_name == "Bluedart"
    assert order.tracking_url == "https://shiprocket.co/tracking/AWB777"
    assert order.shipping_status == "AWB Assigned"


def test_nested_shipment_id(client, db, shipped_order):
    resp = push(client, {"shipment": {"id": "54321"}, "shipment_status": "Delivered"})
    assert resp.status_code == 200
    order = reload(db, shipped_order)
    assert order.status == "shipped"
    assert order.shipping_status == "Delivered"


@pytest.mark.parametrize("code", ["PP", "Picked Up", "PICKEDUP"])
def test_picked_up_sets_pickup_date_once(client, db, shipped_order, code):
    push(client, {"shipment_id": 54321, "status_code": code})
    order = reload(db, shipped_order)
    first = order.pickup_scheduled_date
    assert first is not None
    assert order.status == "paid"

    push(client, {"shipment_id": 54321, "status_code": code})
    assert reload(db, shipped_order).pickup_scheduled_date == first


def test_out_for_delivery_changes_nothing_but_mirror(client, db, shipped_order):
    push(client, {"shipment_id": 54321, "status_code": "OT"})
    order = reload(db, shipped_order)
    assert order.status == "paid"
    assert order.shipping_status == "OT"


@pytest.mark.parametrize("code", ["RTO", "Return To Origin", "RETURN_TO_ORIGIN", "RTO Delivered", "rto initiated"])
def test_return_to_origin_cancels(client, db, code):
    order = make_order(db, status="shipped", shiprocket_shipment_id="54321", awb_code="AWB1")
    push(client, {"shipment_id": 54321, "status_code": code})
    assert reload(db, order).status == "cancelled"


def test_return_to_origin_wins_over_new_awb(client, db, shipped_order):
    push(client, {"shipment_id": 54321, "status_code": "RTO", "awb_code": "AWB2"})
    order = reload(db, shipped_order)
    assert order.status == "cancelled"
    assert order.awb_code == "AWB2"


def test_webhook_token_enforced_when_configured(client, db, shipped_order):
    app.dependency_overrides[get_settings] = lambda: get_settings().model_copy(
        update={"SHIPROCKET_WEBHOOK_TOKEN": "hook-token"}
    )
    resp = push(client, {"shipment_id": 54321, "status_code": "DL"})
    assert resp.status_code == 401

    resp = push(client, {"shipment_id": 54321, "status_code": "DL"}, **{"X-Api-Key": "wrong"})
    assert resp.status_code == 401
    assert reload(db, shipped_order).status == "paid"

    resp = push(client, {"shipment_id": 54321, "status_code": "DL"}, **{"X-Api-Key": "hook-token"})
    assert resp.status_code == 200
    assert reload(db, shipped_order).status == "shipped"
