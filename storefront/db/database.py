# storefront/db/database.py
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from storefront.config import DATABASE_URL, SQL_ECHO

engine_options = {"echo": SQL_ECHO}
if DATABASE_URL.startswith("sqlite"):
    # соединение aiosqlite живёт в том event loop, где его открыли
    engine_options["poolclass"] = NullPool

# Один движок на процесс, пул соединений общий для всех запросов
engine = create_async_engine(DATABASE_URL, **engine_options)

# expire_on_commit=False: объекты читаются после commit без повторного SELECT
SessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()


# Зависимость FastAPI: сессия открывается на запрос и закрывается после ответа
async def get_db():
    async with SessionLocal() as session:
        yield session
