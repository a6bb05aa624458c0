def test_serviceable(client, shiprocket):
    shiprocket.add("GET", "/courier/serviceability/", json={
        "data": {"available_courier_companies": [{"courier_name": "Delhivery", "rate": 75.0}]},
    })
    resp = client.get("/shipping/check-serviceability", params={"pincode": "700016"})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "serviceable": True,
        "couriers": [{"courier_name": "Delhivery", "rate": 75.0}],
    }
    assert shiprocket.calls("/courier/serviceability/")[0].url.params["weight"] == "0.5"


def test_not_serviceable(client, shiprocket):
    shiprocket.add("GET", "/courier/serviceability/", json={"data": {"available_courier_companies": []}})
    resp = client.get("/shipping/check-serviceability", params={"pincode": "999999", "weight": 2})
    assert resp.json()["serviceable"] is False


def test_validation(client, shiprocket):
    assert client.get("/shipping/check-serviceability").status_code == 400
    resp = client.get("/shipping/check-serviceability", params={"pincode": "700016", "weight": -1})
    assert resp.status_code == 400
    resp = client.get("/shipping/check-serviceability", params={"pincode": "700016", "weight": "heavy"})
    assert resp.status_code == 400


def test_vendor_failure(client, shiprocket):
    shiprocket.add("GET", "/courier/serviceability/", status_code=500, json={"message": "Upstream down"})
    resp = client.get("/shipping/check-serviceability", params={"pincode": "700016"})
    assert resp.status_code == 502
    assert resp.json() == {
        "error": "Failed to check serviceability",
        "details": "Shiprocket API error: Upstream down",
    }
