import re


def _submit(client, headers, *items):
    return client.post("/api/consignor/items", json={"items": list(items)}, headers=headers)


def test_consignor_submission_creates_order(client, consignor_headers):
    response = _submit(
        client,
        consignor_headers,
        {"title": "Vintage leren jas", "estimated_value": 120},
        {"title": "Zijden sjaal", "estimated_value": 80, "payout_type": "cash"},
    )
    assert response.status_code == 201
    order = response.json()

    assert re.match(r"^ORD-\d{8}-\d{4}$", order["order_number"])
    assert order["status"] == "awaiting_shipment"
    assert order["customer_email"] == "sanne@example.nl"
    assert order["item_count"] == 2
    assert order["total_value"] == 200.0
    assert order["total_payout"] == 119.2
    assert {i["status"] for i in order["items"]} == {"pending"}


def test_submission_below_threshold_is_refused(client, consignor_headers):
    response = _submit(client, consignor_headers, {"title": "Katoenen shirt", "estimated_value": 35})
    assert response.status_code == 422
    body = response.json()
    assert "not eligible" in body["detail"]
    assert "handling costs" in body["reason"]

    assert client.get("/api/consignor/items", headers=consignor_headers).json() == []


def test_submission_validation(client, consignor_headers):
    assert _submit(client, consignor_headers, {"title": "ab"}).status_code == 422
    assert client.post("/api/consignor/items", json={"items": []}, headers=consignor_headers).status_code == 422
    response = _submit(client, consignor_headers, {"title": "Leren tas", "payout_type": "bitcoin"})
    assert response.status_code == 422


def test_legacy_payout_spelling_is_normalized(client, consignor_headers):
    response = _submit(
        client, consignor_headers,
        {"title": "Designer tas", "estimated_value": 300, "payout_type": "storecredit"},
    )
    assert response.status_code == 201
    pricing = response.json()["items"][0]["pricing"]
    assert pricing["payout_type"] == "store_credit"
    assert pricing["suggested_payout"] == 242.0


def test_admin_intake_creates_customer(client, admin_headers):
    response = client.post(
        "/api/admin/intake",
        json={
            "customer": {"name": "Pieter de Boer", "email": "pieter@example.nl", "city": "Leiden"},
            "items": [{"title": "Wollen jas", "estimated_value": 95}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["customer_name"] == "Pieter de Boer"

    consignors = client.get("/api/admin/consignors", headers=admin_headers).json()
    pieter = next(c for c in consignors if c["email"] == "pieter@example.nl")
    assert pieter["item_count"] == 1
    assert pieter["has_account"] is False

    details = client.get(f"/api/admin/consignors/{pieter['id']}", headers=admin_headers).json()
    assert details["stats"]["total_items"] == 1
    assert details["recent_orders"][0]["item_count"] == 1


def test_admin_creates_consignor_with_login(client, admin_headers):
    response = client.post(
        "/api/admin/consignors",
        json={"name": "Lotte Visser", "email": "lotte@example.nl", "password": "lotte-pass-1"},
        headers=admin_headers,
    )
    assert response.status_code == 201

    login = client.post("/api/auth/login", json={"email": "lotte@example.nl", "password": "lotte-pass-1"})
    assert login.status_code == 200
    assert login.json()["user"]["customer_id"] == response.json()["id"]


def test_consignor_only_sees_own_items_and_orders(client, admin_headers, consignor_headers):
    other = client.post(
        "/api/admin/intake",
        json={
            "customer": {"name": "Pieter de Boer", "email": "pieter@example.nl"},
            "items": [{"title": "Wollen jas", "estimated_value": 95}],
        },
        headers=admin_headers,
    ).json()

    item_id = other["items"][0]["id"]
    assert client.get(f"/api/consignor/items/{item_id}", headers=consignor_headers).status_code == 404
    assert client.get(f"/api/consignor/orders/{other['id']}", headers=consignor_headers).status_code == 403

    own = _submit(client, consignor_headers, {"title": "Vintage leren jas", "estimated_value": 120}).json()
    own_item = own["items"][0]["id"]
    assert client.get(f"/api/consignor/items/{own_item}", headers=consignor_headers).status_code == 200
    orders = client.get("/api/consignor/orders", headers=consignor_headers).json()
    assert [o["id"] for o in orders] == [own["id"]]
