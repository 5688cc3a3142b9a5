from bson import ObjectId

from conftest import API, place_order, product_payload


def test_vendor_only(client, customer):
    headers, _ = customer
    response = client.get(f"{API}/vendor/dashboard", headers=headers)
    assert response.status_code == 403


def test_vendor_product_crud(client, vendor):
    headers, _ = vendor
    response = client.post(f"{API}/vendor/products", headers=headers, json=product_payload(status="draft"))
    assert response.status_code == 201
    product = response.json()["data"]

    response = client.get(f"{API}/vendor/products", headers=headers, params={"status": "draft"})
    assert response.json()["pagination"]["total"] == 1

    response = client.put(f"{API}/vendor/products/{product['_id']}", headers=headers, json={"status": "active"})
    assert response.json()["data"]["status"] == "active"

    response = client.delete(f"{API}/vendor/products/{product['_id']}", headers=headers)
    assert response.status_code == 200
    assert client.get(f"{API}/vendor/products", headers=headers).json()["pagination"]["total"] == 0


def test_orders_and_sub_order_status(client, customer, vendor, register, make_product, db, run):
    headers, _ = customer
    vendor_headers, _ = vendor
    order = place_order(client, headers, make_product(price=10.0), quantity=1).json()["data"]

    body = client.get(f"{API}/vendor/orders", headers=vendor_headers).json()
    assert body["pagination"]["total"] == 1

    response = client.get(f"{API}/vendor/orders/{order['_id']}", headers=vendor_headers)
    assert response.status_code == 200
    assert response.json()["data"]["vendor_order"]["total"] == 10.0

    response = client.put(f"{API}/vendor/orders/{order['_id']}/status", headers=vendor_headers, json={
        "status": "shipped", "trackingNumber": "TRK1", "carrier": "UPS",
    })
    assert response.status_code == 200
    sub = response.json()["data"]
    assert sub["status"] == "shipped"
    assert sub["tracking"]["tracking_number"] == "TRK1"
    assert sub["tracking"]["shipped_at"]

    stored = run(db.orders.find_one({"_id": ObjectId(order["_id"])}))
    assert stored["status"] == "pending"

    body = client.get(f"{API}/vendor/orders", headers=vendor_headers, params={"status": "pending"}).json()
    assert body["pagination"]["total"] == 0

    other_vendor, _ = register("vendor")
    response = client.get(f"{API}/vendor/orders/{order['_id']}", headers=other_vendor)
    assert response.status_code == 403


def test_invalid_sub_order_status(client, vendor):
    headers, _ = vendor
    response = client.put(f"{API}/vendor/orders/{ObjectId()}/status", headers=headers, json={"status": "lost"})
    assert response.status_code == 400


def test_dashboard_counts_delivered_revenue(client, customer, vendor, make_product, db, run):
    headers, _ = customer
    vendor_headers, _ = vendor
    product = make_product(price=10.0)
    delivered = place_order(client, headers, product, quantity=2).json()["data"]
    place_order(client, headers, product, quantity=1)
    run(db.orders.update_one({"_id": ObjectId(delivered["_id"])}, {"$set": {"status": "delivered"}}))

    data = client.get(f"{API}/vendor/dashboard", headers=vendor_headers).json()["data"]
    assert data["stats"]["total_products"] == 1
    assert data["stats"]["total_orders"] == 2
    assert data["stats"]["pending_orders"] == 2
    assert data["stats"]["total_revenue"] == 20.0
    assert len(data["monthly_revenue"]) == 1
    assert len(data["recent_orders"]) == 2

    data = client.get(f"{API}/vendor/analytics", headers=vendor_headers, params={"period": "7d"}).json()["data"]
    assert data["revenue"] == {"total": 20.0, "count": 1}
