# nirapod_auth/db/seed.py
import argparse
import asyncio
import base64
import logging
import random
import uuid
from datetime import datetime, timezone
from faker import Faker
from tqdm import tqdm

from nirapod_auth.core.config import settings
from nirapod_auth.core.security import hash_password
from nirapod_auth.db.session import connect_db_pool, get_pool, close_db_pool
from nirapod_auth.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

fake = Faker()

FAKE_USER_PASSWORD = "nirapod123"
# stands in for uploaded document scans
PLACEHOLDER_IMAGE = base64.b64encode(b"seeded-document-placeholder").decode("ascii")


def new_user(name: str, email: str, phone: str, password: str, is_admin: bool = False) -> dict:
    return {
        "id": uuid.uuid4().hex,
        "name": name,
        "email": email,
        "phone": phone,
        "hashed_password": hash_password(password),
        "nid_front": PLACEHOLDER_IMAGE,
        "nid_back": PLACEHOLDER_IMAGE,
        "photo": fake.image_url(),
        "is_verified": is_admin,
        "is_admin": is_admin,
        "created_at": datetime.now(timezone.utc),
    }


async def ensure_admin(repo: UserRepository) -> dict:
    """Create the bootstrap admin, or promote the existing account with that email."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD or not settings.ADMIN_PHONE:
        raise RuntimeError("ADMIN_EMAIL, ADMIN_PHONE and ADMIN_PASSWORD must be set")

    existing = await repo.get_by_email(settings.ADMIN_EMAIL)
    if existing:
        logger.info("Promoting existing user %s to admin", existing["id"])
        return await repo.promote_to_admin(existing["id"])

    admin = new_user(
        settings.ADMIN_NAME, settings.ADMIN_EMAIL, settings.ADMIN_PHONE, settings.ADMIN_PASSWORD,
        is_admin=True,
    )
    logger.info("Creating admin %s", admin["email"])
    return await repo.create(admin)


async def seed(num_users: int = 0):
    await connect_db_pool()
    pool = await get_pool()
    if pool is None:
        raise RuntimeError("Database pool could not be initialized")

    async with pool.acquire() as conn:
        repo = UserRepository(conn)
        await ensure_admin(repo)

        for _ in tqdm(range(num_users), desc="Creating users"):
            phone = f"01{random.randint(300000000, 999999999)}"
            await repo.create(new_user(fake.name(), fake.unique.email(), phone, FAKE_USER_PASSWORD))

    await close_db_pool()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    parser = argparse.ArgumentParser(description="Create the admin account and optional fake users.")
    parser.add_argument("--users", type=int, default=0, help="number of unverified fake users to add")
    args = parser.parse_args()
    asyncio.run(seed(args.users))
