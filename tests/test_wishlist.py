from bson import ObjectId

from conftest import API


def test_wishlist_flow(client, customer, make_product):
    headers, _ = customer
    first = make_product(name="First")
    second = make_product(name="Second")

    response = client.post(f"{API}/wishlist/{first['_id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["wishlist_count"] == 1
    client.post(f"{API}/wishlist/{second['_id']}", headers=headers)

    response = client.post(f"{API}/wishlist/{first['_id']}", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Product already in wishlist"

    response = client.get(f"{API}/wishlist", headers=headers)
    body = response.json()
    assert body["count"] == 2
    assert [p["name"] for p in body["data"]] == ["First", "Second"]

    response = client.get(f"{API}/wishlist/check/{second['_id']}", headers=headers)
    assert response.json()["data"]["in_wishlist"] is True

    response = client.delete(f"{API}/wishlist/{first['_id']}", headers=headers)
    assert response.json()["data"]["wishlist_count"] == 1

    response = client.delete(f"{API}/wishlist/{first['_id']}", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Product not in wishlist"

    client.delete(f"{API}/wishlist", headers=headers)
    assert client.get(f"{API}/wishlist", headers=headers).json()["count"] == 0


def test_wishlist_invalid_and_unknown_product(client, customer):
    headers, _ = customer
    response = client.post(f"{API}/wishlist/not-an-id", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid product ID"

    response = client.post(f"{API}/wishlist/{ObjectId()}", headers=headers)
    assert response.status_code == 404


def test_deleted_products_drop_out_of_wishlist(client, customer, vendor, make_product):
    headers, _ = customer
    vendor_headers, _ = vendor
    product = make_product()
    client.post(f"{API}/wishlist/{product['_id']}", headers=headers)
    client.delete(f"{API}/products/{product['_id']}", headers=vendor_headers)
    assert client.get(f"{API}/wishlist", headers=headers).json()["data"] == []
