"""
Database initialization script

Run once to create the collections' indexes:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from marketplace.core.logging import setup_logging, get_logger
from marketplace.db import mongo
from marketplace.db.indexes import create_indexes

setup_logging()
logger = get_logger(__name__)


async def main():
    logger.info("=" * 60)
    logger.info("  Marketplace Database Setup")
    logger.info("=" * 60)

    await mongo.connect_to_mongo()
    try:
        await create_indexes()

        for entry in await mongo.collection_report():
            names = ", ".join(entry["indexes"]) or "-"
            logger.info(f"{entry['collection']}: {entry['documents']} documents, indexes: {names}")

        logger.info("Database initialization complete")
    finally:
        await mongo.close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
