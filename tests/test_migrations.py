"""
The alembic revision builds the same tables the ORM maps, and tears them down.
"""
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from storecart.database import Base

MIGRATIONS = Path(__file__).resolve().parents[1] / "migrations"


def alembic_config(url):
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_upgrade_and_downgrade(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = alembic_config(url)
    engine = create_engine(url)

    command.upgrade(config, "head")
    tables = set(inspect(engine).get_table_names())
    assert {"carts", "cart_lines", "alembic_version_storecart"} <= tables
    for name in ("carts", "cart_lines"):
        columns = {c["name"] for c in inspect(engine).get_columns(name)}
        assert columns == set(Base.metadata.tables[name].columns.keys())

    command.downgrade(config, "base")
    assert set(inspect(engine).get_table_names()) == {"alembic_version_storecart"}
    engine.dispose()
