import pytest

from services import DashboardService, IntakeService, ItemService


@pytest.fixture()
def stocked(db, consignor_user):
    """Four items: one pending, one listed, one sold, one paid out"""
    order = IntakeService(db).submit(
        consignor_user.customer_id,
        [
            {"title": "Wollen sjaal", "estimated_value": 60},
            {"title": "Vintage leren jas", "estimated_value": 120},
            {"title": "Designer tas", "estimated_value": 300},
            {"title": "Zilveren horloge", "estimated_value": 500},
        ],
    )
    by_title = {i.title: i.id for i in order.items}

    items = ItemService(db)
    for title in ("Vintage leren jas", "Designer tas", "Zilveren horloge"):
        item_id = by_title[title]
        items.change_status(item_id, "analyzing")
        items.change_status(item_id, "approved")
        items.change_status(item_id, "listed")

    items.record_sale(by_title["Designer tas"], 300)
    items.record_sale(by_title["Zilveren horloge"], 500)
    items.record_payout(by_title["Zilveren horloge"])
    return by_title


def test_consignor_stats(db, consignor_user, stocked):
    dashboard = DashboardService(db).consignor_dashboard(consignor_user.customer_id)
    stats = dashboard["stats"]

    assert len(dashboard["items"]) == 4
    assert stats["pending_count"] == 1
    assert stats["listed_count"] == 1
    assert stats["sold_count"] == 1
    assert stats["paid_count"] == 1
    assert stats["total_sales"] == 800.0
    assert stats["total_payout"] == 620.0
    assert stats["paid_out"] == 400.0
    assert stats["outstanding_payout"] == 220.0
    assert stats["pending_value"] == 60.0
    assert stats["listed_value"] == 120.0
    assert stats["sold_value"] == 300.0
    assert {"status": "pending", "count": 1} in stats["status_distribution"]


def test_consignor_dashboard_endpoint(client, consignor_headers, stocked):
    response = client.get("/api/consignor/dashboard", headers=consignor_headers)
    assert response.status_code == 200
    paid = next(i for i in response.json()["items"] if i["status"] == "paid")
    assert paid["final_sale_price"] == 500.0
    assert paid["payout_amount"] == 400.0


def test_admin_stats(client, admin_headers, stocked):
    response = client.get("/api/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()

    assert stats["total_intakes"] == 4
    assert stats["pending_analysis"] == 1
    assert stats["active_listings"] == 1
    assert stats["sold_items"] == 2
    assert stats["paid_items"] == 1
    assert stats["total_orders"] == 1
    assert stats["total_consignors"] == 1
    assert stats["total_sales"] == 800.0
    assert stats["total_payouts"] == 620.0
    assert stats["commission_earned"] == 180.0


def test_empty_dashboard(db, consignor_user):
    stats = DashboardService(db).consignor_dashboard(consignor_user.customer_id)["stats"]
    assert stats["items_count"] == 0
    assert stats["total_sales"] == 0
    assert stats["status_distribution"] == []


def test_storefront_lists_only_listed_items(client, stocked):
    response = client.get("/api/storefront/items")
    assert response.status_code == 200
    listed = response.json()
    assert [i["title"] for i in listed] == ["Vintage leren jas"]
    assert listed[0]["price"] == 120.0
