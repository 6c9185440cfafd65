# emma/db/database.py
import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.errors import DatabaseNotConfiguredError

# Load environment variables from a .env file if present so that running the
# application locally works without manually exporting variables.
load_dotenv()


def to_async_url(url: Optional[str]) -> Optional[str]:
    """Make sure a Postgres URL uses SQLAlchemy's ``+asyncpg`` driver."""
    if not url or "+asyncpg" in url:
        return url
    if "+psycopg" in url:
        return url.replace("+psycopg", "+asyncpg")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


DATABASE_URL = to_async_url(os.getenv("DB_URL"))

# None when DB_URL is missing; datastore-backed requests then answer 500.
engine: Optional[AsyncEngine] = create_async_engine(DATABASE_URL) if DATABASE_URL else None


def is_configured() -> bool:
    return engine is not None


async def get_session():
    if engine is None:
        raise DatabaseNotConfiguredError("DB_URL is not set")
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
