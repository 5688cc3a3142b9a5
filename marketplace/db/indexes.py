"""
marketplace/db/indexes.py

Purpose: Database index management

- Unique indexes for emails, SKUs, slugs, order numbers and carts
- 2dsphere indexes for seller coverage and product location queries
- Text index backing product search
"""

from pymongo import ASCENDING, DESCENDING, GEOSPHERE, TEXT
from pymongo.errors import PyMongoError

from marketplace.db.mongo import (
    get_users_collection,
    get_sellers_collection,
    get_products_collection,
    get_orders_collection,
    get_banners_collection,
    get_homepage_sections_collection,
    get_carts_collection,
)
from marketplace.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes for optimal performance.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()
        sellers = get_sellers_collection()
        products = get_products_collection()
        orders = get_orders_collection()
        banners = get_banners_collection()
        sections = get_homepage_sections_collection()
        carts = get_carts_collection()

        logger.info("Creating database indexes...")

        # users
        await users.create_index("email", unique=True, name="user_email_unique")
        await users.create_index("role", name="user_role_idx")
        await users.create_index("reset_password_token", sparse=True, name="user_reset_token_idx")

        # sellers
        await sellers.create_index("email", unique=True, name="seller_email_unique")
        await sellers.create_index([("geo", GEOSPHERE)], name="seller_geo_2dsphere")
        await sellers.create_index(
            [("is_approved", ASCENDING), ("is_suspended", ASCENDING)],
            name="seller_status_idx"
        )
        await sellers.create_index("address.pincode", name="seller_pincode_idx")
        logger.debug("Created seller indexes")

        # products
        await products.create_index(
            [("name", TEXT), ("description", TEXT), ("tags", TEXT)],
            name="product_text_idx"
        )
        await products.create_index([("location", GEOSPHERE)], name="product_location_2dsphere")
        await products.create_index([("category", ASCENDING), ("status", ASCENDING)], name="product_category_status_idx")
        await products.create_index([("price", ASCENDING)], name="product_price_idx")
        await products.create_index([("ratings.average", DESCENDING)], name="product_rating_idx")
        await products.create_index("vendor", name="product_vendor_idx")
        await products.create_index("seller", name="product_seller_idx")
        await products.create_index("sku", unique=True, sparse=True, name="product_sku_unique")
        await products.create_index("slug", name="product_slug_idx")
        logger.debug("Created product indexes")

        # orders
        await orders.create_index("order_number", unique=True, name="order_number_unique")
        await orders.create_index([("user", ASCENDING), ("created_at", DESCENDING)], name="order_user_idx")
        await orders.create_index("status", name="order_status_idx")
        await orders.create_index("vendor_orders.vendor", name="order_vendor_idx")

        # banners
        await banners.create_index(
            [("is_active", ASCENDING), ("start_date", ASCENDING), ("end_date", ASCENDING)],
            name="banner_window_idx"
        )
        await banners.create_index([("priority", DESCENDING), ("order", ASCENDING)], name="banner_sort_idx")

        # homepage sections
        await sections.create_index([("is_visible", ASCENDING), ("order", ASCENDING)], name="section_visible_order_idx")

        # carts
        await carts.create_index("user", unique=True, name="cart_user_unique")

        logger.info("All database indexes created successfully")

        product_indexes = await products.index_information()
        seller_indexes = await sellers.index_information()
        logger.info(
            f"Index summary: Products={len(product_indexes)}, Sellers={len(seller_indexes)}"
        )

    except PyMongoError as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes():
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    logger.warning("Dropping all database indexes...")
    for getter in (
        get_users_collection,
        get_sellers_collection,
        get_products_collection,
        get_orders_collection,
        get_banners_collection,
        get_homepage_sections_collection,
        get_carts_collection,
    ):
        await getter().drop_indexes()
    logger.info("All indexes dropped successfully")
