"""Alembic environment script for taskboard migrations."""
import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

import taskboard.infrastructure.db.models  # noqa: F401
from taskboard.config import get_settings
from taskboard.infrastructure.db.session import Base

logger = logging.getLogger("alembic.env")

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Model MetaData for 'autogenerate' support
target_metadata = Base.metadata


def get_connection_url() -> str:
    """SQLAlchemy URL built from DATABASE_URL"""
    return get_settings().get_sqlalchemy_url()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL to stdout)."""
    context.configure(
        url=get_connection_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    engine = create_engine(get_connection_url(), echo=False)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        try:
            with context.begin_transaction():
                context.run_migrations()
        except Exception as e:
            logger.error(f"Error during migration: {e}")
            raise


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
