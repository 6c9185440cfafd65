import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

# Ensure project root is in sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Import all models so Alembic can detect metadata
import emma.models  # noqa: E402,F401

# Load environment variables
load_dotenv()

# Alembic Config
config = context.config


def to_sync_url(url):
    """Alembic runs migrations with the synchronous psycopg driver."""
    if not url:
        return url
    if "+asyncpg" in url:
        return url.replace("+asyncpg", "+psycopg")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


DB_URL = to_sync_url(os.getenv("DB_URL"))
if not DB_URL:
    raise RuntimeError("DB_URL must be set to run migrations")
logger.info("Running migrations against {}", DB_URL.split("@")[-1])
config.set_main_option("sqlalchemy.url", DB_URL)

# Setup logging from alembic.ini
if config.config_file_name:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate
target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (sync)."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
