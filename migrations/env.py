from logging.config import fileConfig
from sqlalchemy import pool
from sqlalchemy import create_engine
from alembic import context
import os
import sys

# Ensure project root is on sys.path so imports like 'models' work
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from models.base import Base
from models import audit_log, organization, procurement_request, purchase_order, user  # noqa: F401,E402
from settings.config import get_settings

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Ensure script_location is set even if config file isn't found via -c
if not config.get_main_option("script_location"):
    config.set_main_option("script_location", os.path.join(PROJECT_ROOT, "migrations"))

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# model metadata for 'autogenerate' support
target_metadata = Base.metadata


def get_url() -> str:
    # Migrations run synchronously; psycopg serves both the sync and async drivers.
    return get_settings().build_database_url()


def run_migrations_offline():
    """
    Run migrations in 'offline' mode.
    """
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """
    Run migrations in 'online' mode.
    Uses programmatically created engine so we don't require alembic.ini.
    """
    connectable = create_engine(get_url(), poolclass=pool.NullPool, future=True)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
