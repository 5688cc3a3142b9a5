"""
marketplace/db/mongo.py

Purpose: MongoDB client lifecycle and collection access

- One Motor client per process, opened by the app lifespan
- Startup connect retries with exponential backoff
- Typed getters for every marketplace collection
"""

import asyncio
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from marketplace.core.config import settings
from marketplace.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None

USERS = "users"
SELLERS = "sellers"
PRODUCTS = "products"
ORDERS = "orders"
BANNERS = "banners"
HOMEPAGE_SECTIONS = "homepage_sections"
CARTS = "carts"

COLLECTIONS = (USERS, SELLERS, PRODUCTS, ORDERS, BANNERS, HOMEPAGE_SECTIONS, CARTS)

INITIAL_RETRY_DELAY = 2


def _new_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
    )


async def connect_to_mongo():
    """
    Opens the shared client and pings the server.

    Raises:
        ConnectionError: When every attempt fails
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    attempts = settings.MONGODB_CONNECT_RETRIES
    delay = INITIAL_RETRY_DELAY
    for attempt in range(1, attempts + 1):
        client = _new_client()
        try:
            await client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(f"MongoDB connect attempt {attempt}/{attempts} failed: {e}")
            if attempt == attempts:
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(delay)
            delay *= 2
            continue

        _client = client
        _database = client[settings.MONGODB_DB_NAME]
        logger.info(f"Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
        return


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return
    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    if _client is None:
        logger.error("MongoDB client not initialized")
        return False
    try:
        await _client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"Database health check failed: {e}")
        return False
    return True


def get_database() -> AsyncIOMotorDatabase:
    """
    Raises:
        RuntimeError: If connect_to_mongo() has not run
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _database


def get_collection(name: str) -> AsyncIOMotorCollection:
    return get_database()[name]


async def collection_report() -> List[Dict[str, Any]]:
    """Document count and secondary index names for each collection."""
    db = get_database()
    report = []
    for name in COLLECTIONS:
        indexes = await db[name].index_information()
        report.append({
            "collection": name,
            "documents": await db[name].count_documents({}),
            "indexes": sorted(idx for idx in indexes if idx != "_id_"),
        })
    return report


def get_users_collection() -> AsyncIOMotorCollection:
    """
    Customers, vendors and admins. Embeds shipping addresses,
    preferences, the wishlist and the refresh token list.
    """
    return get_collection(USERS)


def get_sellers_collection() -> AsyncIOMotorCollection:
    """Location-aware stores, with their own credentials and refresh tokens."""
    return get_collection(SELLERS)


def get_products_collection() -> AsyncIOMotorCollection:
    return get_collection(PRODUCTS)


def get_orders_collection() -> AsyncIOMotorCollection:
    return get_collection(ORDERS)


def get_banners_collection() -> AsyncIOMotorCollection:
    return get_collection(BANNERS)


def get_homepage_sections_collection() -> AsyncIOMotorCollection:
    return get_collection(HOMEPAGE_SECTIONS)


def get_carts_collection() -> AsyncIOMotorCollection:
    return get_collection(CARTS)
