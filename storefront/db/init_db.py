# storefront/db/init_db.py
import logging

from storefront.auth_utils import hash_password
from storefront.config import ADMIN_USERNAME, ADMIN_PASSWORD
from storefront.db.database import engine, Base, SessionLocal
from storefront.db.functions import get_user_by_username, create_user
from storefront.db.models import RoleEnum

logger = logging.getLogger(__name__)


async def init_db():
    async with engine.begin() as conn:
        # Создание всех таблиц
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin()


async def seed_admin():
    """Создаёт администратора из ADMIN_USERNAME / ADMIN_PASSWORD, если его ещё нет."""
    if not ADMIN_USERNAME or not ADMIN_PASSWORD:
        return
    async with SessionLocal() as db:
        if await get_user_by_username(db, ADMIN_USERNAME):
            return
        await create_user(db, ADMIN_USERNAME, hash_password(ADMIN_PASSWORD), role=RoleEnum.admin)
        logger.info("Seeded admin account %s", ADMIN_USERNAME)
