import os
import sys
from pathlib import Path
from alembic import context
from sqlalchemy import engine_from_config, pool

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from src.db.interfaces.postgresql import Base
import src.models  # noqa

config = context.config
target_metadata = Base.metadata

database_url = os.getenv("POSTGRES_DATABASE_URL")
if not database_url:
    raise RuntimeError("POSTGRES_DATABASE_URL is not set")

config.set_main_option("sqlalchemy.url", database_url)


def run_migrations_offline():
    """Emit the collections DDL as SQL without a live connection."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
