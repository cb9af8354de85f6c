from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from storecart.database import Base, DATABASE_URL
import storecart.models  # noqa: F401  registers carts / cart_lines on Base.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# shared databases keep one version row per service
VERSION_TABLE = "alembic_version_storecart"


def sync_url():
    """The application URL with its async driver swapped for the sync one."""
    url = config.get_main_option("sqlalchemy.url") or DATABASE_URL
    return url.replace("+asyncpg", "").replace("+aiosqlite", "")


def migration_options(**extra):
    options = dict(
        target_metadata=target_metadata,
        version_table=VERSION_TABLE,
        compare_type=True,
        compare_server_default=True,
    )
    options.update(extra)
    return options


def run_migrations_offline():
    context.configure(
        **migration_options(
            url=sync_url(),
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
        )
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = sync_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(**migration_options(connection=connection))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
