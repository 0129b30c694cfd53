"""
Alembic environment.

The database URL comes from the TOML config selected by ``EMISSIONS_CONFIG``
unless the caller has already set ``sqlalchemy.url`` (see
``app.database.base.apply_db_migration``).
"""
import logging
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from app.core.config import get_config
from app.database import Base
from app.database import schemas  # noqa: F401  registers the models on Base.metadata
from app.database.base import get_db_url, get_sync_db_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def get_url() -> str:
    config_file = os.environ.get("EMISSIONS_CONFIG")
    if config_file and not config.attributes.get("url_from_app"):
        return get_sync_db_url(get_db_url(get_config(config_file)))
    return config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        {"sqlalchemy.url": get_url()},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        logger.info(f"Running migrations against {connection.engine.url.drivername}")

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
