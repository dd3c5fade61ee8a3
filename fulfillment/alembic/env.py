from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# alembic may be invoked from outside the repo root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from fulfillment.app.core.config import settings  # noqa: E402
from fulfillment.app.db.base import Base  # noqa: E402
from fulfillment.app.db.models import models_v1  # noqa: F401,E402

target_metadata = Base.metadata


def _database_url() -> str:
    # an explicit DATABASE_URL beats the ini default
    if os.getenv("DATABASE_URL") or not config.get_main_option("sqlalchemy.url"):
        return settings.DATABASE_URL
    return config.get_main_option("sqlalchemy.url")


def run_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
