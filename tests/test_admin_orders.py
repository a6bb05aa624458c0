from conftest import make_order, reload


def test_list_orders(client, db, admin_headers):
    make_order(db, status="pending", customer_name="Ravi Kumar", customer_email="ravi@example.com")
    make_order(db, status="paid", razorpay_order_id="order_abc")
    make_order(db, status="paid", razorpay_order_id="order_xyz")

    resp = client.get("/admin/orders", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "total_pages": 1}
    # Newest first
    assert body["orders"][0]["razorpay_order_id"] == "order_xyz"

    resp = client.get("/admin/orders", params={"status": "paid"}, headers=admin_headers)
    assert resp.json()["pagination"]["total"] == 2

    resp = client.get("/admin/orders", params={"search": "ravi"}, headers=admin_headers)
    assert [o["customer"]["name"] for o in resp.json()["orders"]] == ["Ravi Kumar"]

    resp = client.get("/admin/orders", params={"search": "ABC"}, headers=admin_headers)
    assert [o["razorpay_order_id"] for o in resp.json()["orders"]] == ["order_abc"]

    resp = client.get("/admin/orders", params={"status": "lost"}, headers=admin_headers)
    assert resp.status_code == 400


def test_get_order(client, db, admin_headers):
    order = make_order(db, items=[{"product_id": 1, "title": "Classic Steel 40mm", "price": 129900, "qty": 1}])
    resp = client.get(f"/admin/orders/{order.id}", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["order_number"] == order.order_number
    assert body["items"][0]["title"] == "Classic Steel 40mm"

    assert client.get("/admin/orders/999", headers=admin_headers).status_code == 404


def test_update_status(client, db, admin_headers):
    order = make_order(db, status="paid")
    resp = client.patch(f"/admin/orders/{order.id}", json={"status": "confirmed"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "status": "confirmed"}
    assert reload(db, order).status == "confirmed"

    resp = client.patch(f"/admin/orders/{order.id}", json={"status": "teleported"}, headers=admin_headers)
    assert resp.status_code == 400

    resp = client.patch("/admin/orders/999", json={"status": "paid"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Order not found"


def test_admin_orders_require_admin(client, user_headers):
    assert client.get("/admin/orders", headers=user_headers).status_code == 401
