import hashlib
import hmac
import json

from storefront.domain.models import Order
from storefront.infrastructure.razorpay import verify_payment_signature, verify_webhook_signature
from conftest import make_order, reload

KEY_SECRET = "rzp_test_secret"


def sign(payload: bytes, secret: str = KEY_SECRET) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def captured_event(order_id="order_test_1", payment_id="pay_1"):
    return json.dumps({
        "event": "payment.captured",
        "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id, "amount": 129900}}},
    }).encode()


def test_signature_helpers():
    signature = sign(b"order_1|pay_1")
    assert verify_payment_signature("order_1", "pay_1", signature, KEY_SECRET)
    assert not verify_payment_signature("order_1", "pay_2", signature, KEY_SECRET)
    assert not verify_payment_signature("order_1", "pay_1", signature, "")
    assert verify_webhook_signature(b"{}", sign(b"{}"), KEY_SECRET)
    assert not verify_webhook_signature(b"{}", "", KEY_SECRET)


def test_verify_payment_marks_order_paid(client, db):
    order = make_order(db, status="pending")
    resp = client.post("/checkout/verify", json={
        "order_id": order.id,
        "razorpay_order_id": "order_test_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": sign(b"order_test_1|pay_1"),
    })
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "order_id": order.id}

    order = reload(db, order)
    assert order.status == "paid"
    assert order.razorpay_payment_id == "pay_1"
    assert order.razorpay_signature == sign(b"order_test_1|pay_1")


def test_verify_payment_bad_signature(client, db):
    order = make_order(db, status="pending")
    resp = client.post("/checkout/verify", json={
        "order_id": order.id,
        "razorpay_order_id": "order_test_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "0" * 64,
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid payment signature"
    assert reload(db, order).status == "pending"


def test_verify_payment_unknown_order(client):
    resp = client.post("/checkout/verify", json={
        "order_id": 999,
        "razorpay_order_id": "order_x",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": sign(b"order_x|pay_1"),
    })
    assert resp.status_code == 404


def test_verify_payment_for_another_gateway_order(client, db):
    order = make_order(db, status="pending", razorpay_order_id="order_mine")
    resp = client.post("/checkout/verify", json={
        "order_id": order.id,
        "razorpay_order_id": "order_other",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": sign(b"order_other|pay_1"),
    })
    assert resp.status_code == 400
    assert reload(db, order).status == "pending"


def test_webhook_requires_signature(client):
    resp = client.post("/webhooks/razorpay", content=captured_event())
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing signature"


def test_webhook_rejects_bad_signature(client, db):
    order = make_order(db, status="pending")
    body = captured_event()
    resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body, "wrong")})
    assert resp.status_code == 401
    assert reload(db, order).status == "pending"


def test_webhook_captured_is_idempotent(client, db):
    order = make_order(db, status="pending")
    body = captured_event()
    headers = {"X-Razorpay-Signature": sign(body), "Content-Type": "application/json"}

    resp = client.post("/webhooks/razorpay", content=body, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    order = reload(db, order)
    assert order.status == "paid"
    assert order.razorpay_payment_id == "pay_1"
    first_update = order.updated_at

    resp = client.post("/webhooks/razorpay", content=body, headers=headers)
    assert resp.json() == {"received": True}
    order = reload(db, order)
    assert order.status == "paid"
    assert order.updated_at == first_update


def test_webhook_does_not_regress_shipped_order(client, db):
    order = make_order(db, status="shipped")
    body = captured_event()
    resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body)})
    assert resp.status_code == 200
    assert reload(db, order).status == "shipped"


def test_webhook_acknowledges_other_events_and_unknown_orders(client, db):
    body = json.dumps({"event": "payment.failed", "payload": {}}).encode()
    resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body)})
    assert resp.json() == {"received": True}

    body = captured_event(order_id="order_unknown")
    resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body)})
    assert resp.json() == {"received": True}
    assert db.query(Order).count() == 0


def test_webhook_captured_revives_cancelled_order(client, db):
    order = make_order(db, status="cancelled")
    body = captured_event(payment_id="pay_late")
    resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body)})
    assert resp.status_code == 200
    order = reload(db, order)
    assert order.status == "paid"
    assert order.razorpay_payment_id == "pay_late"


def test_webhook_acknowledges_malformed_payloads(client, db):
    order = make_order(db, status="pending")
    for body in (
        json.dumps({"event": "payment.captured", "payload": {"payment": None}}).encode(),
        json.dumps({"event": "payment.captured", "payload": None}).encode(),
        json.dumps([{"event": "payment.captured"}]).encode(),
    ):
        resp = client.post("/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": sign(body)})
        assert resp.status_code == 200
        assert resp.json() == {"received": True}
    assert reload(db, order).status == "pending"
