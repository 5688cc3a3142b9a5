"""
Creates (or promotes) an admin account.

Usage:
    python scripts/create_admin.py <email> <password> [name]
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from marketplace.core.logging import setup_logging, get_logger
from marketplace.core.security import hash_password
from marketplace.db import mongo
from marketplace.models.user import new_user_document
from marketplace.utils.constants import ROLE_ADMIN

setup_logging()
logger = get_logger(__name__)


async def create_admin(email: str, password: str, name: str):
    await mongo.connect_to_mongo()
    try:
        users = mongo.get_users_collection()
        email = email.lower()
        existing = await users.find_one({"email": email})
        if existing:
            await users.update_one({"_id": existing["_id"]}, {"$set": {"role": ROLE_ADMIN}})
            logger.info(f"Promoted {email} to admin")
            return
        await users.insert_one(new_user_document(name, email, hash_password(password), role=ROLE_ADMIN))
        logger.info(f"Created admin {email}")
    finally:
        await mongo.close_mongo_connection()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(create_admin(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else "Admin"))
