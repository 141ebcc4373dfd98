"""Alembic environment for storerate: DATABASE_URL from settings, tables from storerate.models."""

import os
from logging.config import fileConfig

from alembic import context

os.environ.setdefault("APP_ENV", "dev")
from storerate.core.config import get_settings
from storerate.core.database import Database
from storerate.models import Base

config = context.config
if config.config_file_name is not None and config.has_section("formatters"):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
database_url = get_settings().DATABASE_URL


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place; batch mode recreates tables.
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without a database connection."""
    _configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})


def run_migrations_online() -> None:
    """Apply migrations through the same Database handle the app uses (SQLite FK pragma included)."""
    database = Database(database_url)
    try:
        with database.engine.connect() as connection:
            _configure(connection=connection)
    finally:
        database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
