"""
Alembic Migration Environment
==============================

What:  Applies the tasks schema to whichever store DATABASE_URL names.
How:   The URL comes from modulith.config unless overridden on the command
       line (`alembic -x url=sqlite+aiosqlite:///dev.db upgrade head`).
       Migrations run through `connection.run_sync()` on an async engine.
       SQLite targets use batch mode, since it cannot ALTER most columns.
Usage: cd backend && alembic upgrade head
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from modulith.config import settings
from modulith.database import Base

# Every module's models must be imported to register with Base.metadata
from modulith.modules.tasks.models import Task  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or settings.database_url


def configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        # Column type changes (e.g. VARCHAR → TEXT) show up in --autogenerate
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting (`alembic upgrade head --sql`)."""
    url = database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **configure_options(url))

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    url = database_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    connectable = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations, url)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
