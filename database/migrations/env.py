"""Alembic environment для RugFork."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url
from sqlmodel import SQLModel

from config.settings import get_settings
from rugfork import models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _sync_dsn(dsn: str) -> str:
    """Alembic работает синхронно: убираем async-драйвер из DSN."""

    url = make_url(dsn)
    driver = {"sqlite": "sqlite", "postgresql": "postgresql+psycopg2"}.get(url.get_backend_name())
    if driver is None:
        return dsn
    return url.set(drivername=driver).render_as_string(hide_password=False)


settings = get_settings()
sync_dsn = _sync_dsn(settings.database.dsn)
config.set_main_option("sqlalchemy.url", sync_dsn.replace("%", "%%"))

target_metadata = SQLModel.metadata
# SQLite не умеет ALTER COLUMN, поэтому изменения таблиц идут через batch.
render_as_batch = sync_dsn.startswith("sqlite")


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=render_as_batch,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
