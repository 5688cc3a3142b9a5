from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from marketplace.core.exceptions import BadRequestError, ValidationError
from marketplace.models.banner import active_banner_query, validate_window
from marketplace.models.cart import clamp_quantity
from marketplace.models.homepage_section import add_product, reorder_products
from marketplace.models.order import (
    calculate_pricing,
    ensure_cancellable,
    ensure_returnable,
    generate_order_number,
    split_vendor_orders,
    status_update,
)
from marketplace.models.product import (
    is_in_stock,
    is_low_stock,
    merge_delivery_options,
    normalize_images,
    set_primary_image,
)
from marketplace.models.user import apply_default_address

NOW = datetime(2024, 1, 1, 12, 0, 0)


class TestImages:
    def test_first_image_becomes_primary(self):
        images = normalize_images([{"url": "a.jpg"}, {"url": "b.jpg"}])
        assert [i["is_primary"] for i in images] == [True, False]
        assert all(isinstance(i["_id"], ObjectId) for i in images)

    def test_only_first_flagged_image_stays_primary(self):
        images = normalize_images([
            {"url": "a.jpg"},
            {"url": "b.jpg", "is_primary": True},
            {"url": "c.jpg", "is_primary": True},
        ])
        assert [i["is_primary"] for i in images] == [False, True, False]

    def test_empty(self):
        assert normalize_images(None) == []

    def test_set_primary(self):
        images = normalize_images([{"url": "a.jpg"}, {"url": "b.jpg"}])
        assert set_primary_image(images, images[1]["_id"]) is True
        assert [i["is_primary"] for i in images] == [False, True]
        assert set_primary_image(images, ObjectId()) is False


class TestDeliveryOptions:
    def test_defaults_to_standard(self):
        assert merge_delivery_options(None) == {"instant": False, "next_day": False, "standard": True}

    def test_merge_keeps_unspecified_keys(self):
        current = {"instant": True, "next_day": False, "standard": False}
        merged = merge_delivery_options({"next_day": True}, current)
        assert merged == {"instant": True, "next_day": True, "standard": False}

    def test_all_disabled_rejected(self):
        with pytest.raises(BadRequestError):
            merge_delivery_options({"standard": False})


class TestStock:
    def test_clamp_quantity(self):
        product = {"inventory": {"track_quantity": True, "quantity": 3}}
        assert clamp_quantity(10, product) == 3
        assert clamp_quantity(0, product) == 1
        assert clamp_quantity("two", product) == 1

    def test_untracked_inventory_is_unbounded(self):
        product = {"inventory": {"track_quantity": False, "quantity": 0}}
        assert clamp_quantity(50, product) == 50
        assert is_in_stock(product)
        assert is_low_stock(product) is False

    def test_low_stock_threshold(self):
        product = {"inventory": {"track_quantity": True, "quantity": 4, "low_stock_threshold": 5}}
        assert is_low_stock(product) is True
        product["inventory"]["quantity"] = 6
        assert is_low_stock(product) is False


class TestOrders:
    def test_order_number_format(self):
        assert generate_order_number(41, NOW) == "ORD-1704110400000-0042"

    def test_pricing(self):
        items = [{"total": 10.0}, {"total": 5.0}]
        pricing = calculate_pricing(items, tax_rate=0.1)
        assert pricing["subtotal"] == 15.0
        assert pricing["tax"] == 1.5
        assert pricing["total"] == 16.5

    def test_pricing_with_shipping_and_discount(self):
        pricing = calculate_pricing([{"total": 100.0}], tax_rate=0.1, shipping=5, discount=15)
        assert pricing["total"] == 100.0

    def test_split_vendor_orders(self):
        vendor_a, vendor_b, seller = ObjectId(), ObjectId(), ObjectId()
        p1, p2, p3, orphan = ObjectId(), ObjectId(), ObjectId(), ObjectId()
        products = {
            p1: {"vendor": vendor_a},
            p2: {"vendor": vendor_b},
            p3: {"vendor": None, "seller": seller},
            orphan: {},
        }
        items = [
            {"product": p1, "total": 10.0},
            {"product": p2, "total": 4.0},
            {"product": p1, "total": 2.5},
            {"product": p3, "total": 1.0},
            {"product": orphan, "total": 99.0},
        ]
        groups = {g["vendor"]: g for g in split_vendor_orders(items, products)}
        assert set(groups) == {vendor_a, vendor_b, seller}
        assert groups[vendor_a]["total"] == 12.5
        assert len(groups[vendor_a]["items"]) == 2
        assert groups[vendor_b]["status"] == "pending"

    def test_status_update_records_history(self):
        order = {"status": "processing", "status_history": [], "tracking": {}}
        changes = status_update(order, "shipped", notes="out", now=NOW)
        assert changes["status"] == "shipped"
        assert changes["status_history"] == [{"status": "processing", "changed_at": NOW, "notes": "out"}]
        assert changes["tracking.shipped_at"] == NOW

    def test_cancel_marks_refund(self):
        changes = status_update({"status": "pending"}, "cancelled", now=NOW)
        assert changes["payment.status"] == "refunded"

    def test_cancellable_statuses(self):
        ensure_cancellable({"status": "pending"})
        with pytest.raises(BadRequestError):
            ensure_cancellable({"status": "shipped"})

    @pytest.mark.parametrize("days, allowed", [(30, True), (31, False)])
    def test_return_window(self, days, allowed):
        order = {
            "status": "delivered",
            "tracking": {"delivered_at": NOW - timedelta(days=days)},
            "return_info": {"is_returnable": True, "return_window": 30},
        }
        if allowed:
            ensure_returnable(order, now=NOW)
        else:
            with pytest.raises(BadRequestError, match="Return window has expired"):
                ensure_returnable(order, now=NOW)

    def test_return_requires_delivery(self):
        with pytest.raises(BadRequestError):
            ensure_returnable({"status": "shipped"}, now=NOW)


class TestAddresses:
    def test_explicit_default_wins(self):
        a, b = {"_id": ObjectId(), "is_default": True}, {"_id": ObjectId(), "is_default": False}
        apply_default_address([a, b], b["_id"])
        assert (a["is_default"], b["is_default"]) == (False, True)

    def test_falls_back_to_first(self):
        a, b = {"_id": ObjectId()}, {"_id": ObjectId()}
        apply_default_address([a, b], None)
        assert (a["is_default"], b["is_default"]) == (True, False)


class TestContent:
    def test_banner_window(self):
        with pytest.raises(ValidationError):
            validate_window(NOW, NOW - timedelta(days=1))
        validate_window(NOW, None)

    def test_active_banner_query(self):
        query = active_banner_query(NOW)
        assert query["is_active"] is True
        assert query["start_date"] == {"$lte": NOW}
        assert {"end_date": {"$gte": NOW}} in query["$or"]

    def test_section_products_capped(self):
        ids = [ObjectId() for _ in range(4)]
        products = []
        for oid in ids:
            products = add_product(products, oid, max_products=3)
        assert products == ids[1:]
        assert add_product(products, ids[2], max_products=3) == products
        assert reorder_products(ids, 2) == ids[:2]
