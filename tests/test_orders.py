import pytest

from app.api.deps import get_shipping_client
from app.main import app
from connectors.sendcloud_client import SendcloudAPIClient
from database.models import Customer
from services import IntakeService


@pytest.fixture()
def order(db, consignor_user):
    return IntakeService(db).submit(
        consignor_user.customer_id,
        [
            {"title": "Vintage leren jas", "estimated_value": 120},
            {"title": "Zijden sjaal", "estimated_value": 80},
        ],
    )


@pytest.fixture()
def simulated_shipping():
    app.dependency_overrides[get_shipping_client] = lambda: SendcloudAPIClient(
        "https://panel.sendcloud.sc/api/v2"
    )
    yield
    app.dependency_overrides.pop(get_shipping_client, None)


def test_list_and_lookup(client, admin_headers, order):
    listing = client.get("/api/admin/orders", headers=admin_headers).json()
    assert [o["order_number"] for o in listing] == [order.order_number]
    assert listing[0]["item_count"] == 2
    assert listing[0]["customer_name"] == "Sanne de Vries"

    by_number = client.get(f"/api/admin/orders/number/{order.order_number}", headers=admin_headers)
    assert by_number.status_code == 200
    assert by_number.json()["id"] == order.id

    assert client.get("/api/admin/orders/9999", headers=admin_headers).status_code == 404
    assert client.get("/api/admin/orders/number/ORD-00000000-0000", headers=admin_headers).status_code == 404


def test_search(client, admin_headers, order):
    def search(q):
        return client.get("/api/admin/orders/search", params={"q": q}, headers=admin_headers).json()

    assert len(search("sanne")) == 1
    assert len(search("example.nl")) == 1
    assert len(search(order.order_number[-4:])) == 1
    assert search("") == []
    assert search("   ") == []
    assert search("nobody") == []


def test_status_transitions(client, admin_headers, order):
    url = f"/api/admin/orders/{order.id}/status"

    response = client.patch(url, json={"status": "received"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "received"

    response = client.patch(url, json={"status": "completed"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["current_status"] == "received"

    assert client.patch(url, json={"status": "cancelled"}, headers=admin_headers).status_code == 200
    assert client.patch(url, json={"status": "received"}, headers=admin_headers).status_code == 409
    assert client.patch(url, json={"status": "shipped"}, headers=admin_headers).status_code == 422


def test_tracking_code(client, admin_headers, order):
    response = client.patch(
        f"/api/admin/orders/{order.id}/tracking",
        json={"tracking_code": " 3SDUTCH123 "},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["tracking_code"] == "3SDUTCH123"

    found = client.get("/api/admin/orders/search", params={"q": "3SDUTCH"}, headers=admin_headers).json()
    assert [o["id"] for o in found] == [order.id]


def test_create_order_and_move_items(client, admin_headers, order, consignor_user):
    first, second = sorted(i.id for i in order.items)

    created = client.post(
        "/api/admin/orders",
        json={"customer_id": consignor_user.customer_id, "item_ids": [first]},
        headers=admin_headers,
    )
    assert created.status_code == 201
    new_order = created.json()
    assert [i["id"] for i in new_order["items"]] == [first]

    added = client.post(
        f"/api/admin/orders/{new_order['id']}/items",
        json={"item_id": second},
        headers=admin_headers,
    )
    assert added.status_code == 201
    assert added.json()["item_count"] == 2

    removed = client.delete(f"/api/admin/orders/{new_order['id']}/items/{first}", headers=admin_headers)
    assert removed.status_code == 200
    assert [i["id"] for i in removed.json()["items"]] == [second]

    again = client.delete(f"/api/admin/orders/{new_order['id']}/items/{first}", headers=admin_headers)
    assert again.status_code == 404


def test_items_of_another_customer_cannot_be_added(client, admin_headers, db, order):
    other = Customer(name="Pieter de Boer", email="pieter@example.nl")
    db.add(other)
    db.commit()

    created = client.post("/api/admin/orders", json={"customer_id": other.id}, headers=admin_headers)
    assert created.status_code == 201

    response = client.post(
        f"/api/admin/orders/{created.json()['id']}/items",
        json={"item_id": order.items[0].id},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_create_order_for_unknown_customer(client, admin_headers):
    response = client.post("/api/admin/orders", json={"customer_id": 424242}, headers=admin_headers)
    assert response.status_code == 404


def test_simulated_shipping_label(client, admin_headers, order, simulated_shipping):
    response = client.post(
        f"/api/admin/orders/{order.id}/shipping-label",
        json={"weight_kg": 12},
        headers=admin_headers,
    )
    assert response.status_code == 201
    label = response.json()
    assert label["carrier"] == "FedEx"
    assert label["tracking_number"].startswith("SC")
    assert label["label_url"].endswith(".pdf")

    detail = client.get(f"/api/admin/orders/{order.id}", headers=admin_headers).json()
    assert detail["tracking_code"] == label["tracking_number"]
    assert detail["shipping"]["carrier"] == "FedEx"


def test_orders_require_admin(client, consignor_headers, order):
    assert client.get("/api/admin/orders", headers=consignor_headers).status_code == 403
    assert client.get("/api/admin/orders").status_code == 401


def test_totals_follow_moved_items(client, admin_headers, order, consignor_user):
    first, second = sorted(i.id for i in order.items)

    created = client.post(
        "/api/admin/orders",
        json={"customer_id": consignor_user.customer_id, "item_ids": [first]},
        headers=admin_headers,
    ).json()
    assert created["total_value"] == 120.0
    assert created["total_payout"] == 74.4

    source = client.get(f"/api/admin/orders/{order.id}", headers=admin_headers).json()
    assert source["total_value"] == 80.0
    assert source["total_payout"] == 44.8

    removed = client.delete(f"/api/admin/orders/{created['id']}/items/{first}", headers=admin_headers).json()
    assert removed["total_value"] == 0.0
    assert removed["total_payout"] == 0.0

    added = client.post(
        f"/api/admin/orders/{created['id']}/items", json={"item_id": second}, headers=admin_headers
    ).json()
    assert added["total_value"] == 80.0
    source = client.get(f"/api/admin/orders/{order.id}", headers=admin_headers).json()
    assert source["total_value"] == 0.0
    assert source["total_payout"] == 0.0


def test_totals_follow_repricing(client, admin_headers, order):
    first = min(i.id for i in order.items)

    response = client.put(
        f"/api/admin/items/{first}/pricing", json={"listing_price": 200}, headers=admin_headers
    )
    assert response.status_code == 200

    detail = client.get(f"/api/admin/orders/{order.id}", headers=admin_headers).json()
    assert detail["total_value"] == 280.0
    assert detail["total_payout"] == 184.8
