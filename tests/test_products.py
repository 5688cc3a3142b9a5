from conftest import API, product_payload


def test_create_requires_vendor_or_admin(client, customer):
    headers, _ = customer
    response = client.post(f"{API}/products", json=product_payload(), headers=headers)
    assert response.status_code == 403
    assert response.json()["error"] == "User role customer is not authorized to access this route"


def test_create_product_defaults(make_product, vendor):
    _, vendor_body = vendor
    product = make_product(name="Fresh Mangoes!! (1 kg)", sku="abc-1")
    assert product["slug"] == "fresh-mangoes-1-kg"
    assert product["sku"] == "ABC-1"
    assert product["vendor"] == vendor_body["user"]["_id"]
    assert product["delivery_options"] == {"instant": False, "next_day": False, "standard": True}
    assert product["inventory"]["quantity"] == 10
    assert product["is_in_stock"] is True


def test_create_rejects_no_delivery_option(client, vendor):
    headers, _ = vendor
    payload = product_payload(deliveryOptions={"instant": False, "nextDay": False, "standard": False})
    response = client.post(f"{API}/products", json=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "At least one delivery option must be selected"


def test_first_image_becomes_primary(make_product):
    product = make_product(images=[{"url": "https://img/1.jpg"}, {"url": "https://img/2.jpg"}])
    flags = [image["is_primary"] for image in product["images"]]
    assert flags == [True, False]


def test_listing_filters_and_pagination(client, make_product):
    make_product(name="Cheap", price=5, category="books")
    make_product(name="Mid", price=50, category="books")
    make_product(name="Pricey", price=500, category="books")
    make_product(name="Hidden", price=50, category="books", status="draft")

    response = client.get(f"{API}/products", params={"category": "books", "minPrice": 10, "sortBy": "price_high"})
    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["data"]] == ["Pricey", "Mid"]
    assert body["pagination"]["total"] == 2

    response = client.get(f"{API}/products", params={"limit": 1, "page": 2, "sortBy": "price_low"})
    body = response.json()
    assert [p["name"] for p in body["data"]] == ["Mid"]
    assert body["pagination"]["pages"] == 3


def test_delivery_filter(client, make_product):
    make_product(name="Fast", deliveryOptions={"instant": True})
    make_product(name="Slow")
    response = client.get(f"{API}/products", params={"delivery": "instant"})
    assert [p["name"] for p in response.json()["data"]] == ["Fast"]


def test_draft_product_hidden_from_public(client, make_product, vendor):
    headers, _ = vendor
    product = make_product(status="draft")
    assert client.get(f"{API}/products/{product['_id']}").status_code == 404
    response = client.get(f"{API}/products/{product['_id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["vendor"]["name"] == "Test User"


def test_batch_featured_and_categories(client, make_product):
    a = make_product(name="A", category="toys", featured=True)
    b = make_product(name="B", category="games")
    response = client.get(f"{API}/products/batch", params={"ids": f"{a['_id']},{b['_id']},bogus"})
    assert response.json()["count"] == 2

    response = client.get(f"{API}/products/featured")
    assert [p["name"] for p in response.json()["data"]] == ["A"]

    response = client.get(f"{API}/products/categories")
    assert response.json()["data"] == ["games", "toys"]


def test_update_merges_nested_groups(client, make_product, vendor):
    headers, _ = vendor
    product = make_product(deliveryOptions={"instant": True})
    response = client.put(f"{API}/products/{product['_id']}", headers=headers, json={
        "name": "Desk Lamp Pro",
        "deliveryOptions": {"nextDay": True},
        "inventory": {"lowStockThreshold": 2},
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["slug"] == "desk-lamp-pro"
    assert data["delivery_options"] == {"instant": True, "next_day": True, "standard": True}
    assert data["inventory"]["quantity"] == 10
    assert data["inventory"]["low_stock_threshold"] == 2


def test_other_vendor_cannot_update(client, make_product, register):
    product = make_product()
    headers, _ = register("vendor")
    response = client.put(f"{API}/products/{product['_id']}", headers=headers, json={"price": 1})
    assert response.status_code == 403
    assert response.json()["error"] == "Not authorized to update this product"


def test_admin_can_delete_any_product(client, make_product, admin):
    headers, _ = admin
    product = make_product()
    response = client.delete(f"{API}/products/{product['_id']}", headers=headers)
    assert response.status_code == 200
    assert client.get(f"{API}/products/{product['_id']}").status_code == 404


def test_multipart_create_with_json_fields(client, vendor):
    headers, _ = vendor
    response = client.post(f"{API}/products", headers=headers, data={
        "name": "Form Lamp",
        "description": "Sent as a form",
        "price": "12.5",
        "category": "home",
        "status": "active",
        "inventory": '{"quantity": 3}',
        "tags": '["lamp", "light"]',
    }, files={"unused": ("", b"", "application/octet-stream")})
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["price"] == 12.5
    assert data["tags"] == ["lamp", "light"]
    assert data["inventory"]["quantity"] == 3


def test_multipart_malformed_json_field(client, vendor):
    headers, _ = vendor
    response = client.post(f"{API}/products", headers=headers, data={
        "name": "Bad", "description": "x", "price": "1", "category": "home", "tags": "[oops",
    }, files={"unused": ("", b"", "application/octet-stream")})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid tags format"
