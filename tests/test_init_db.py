import importlib.util
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "init_db.py"


@pytest.fixture
def init_db():
    spec = importlib.util.spec_from_file_location("init_db", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_init_creates_every_table(init_db, tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'fresh.db'}")

    assert init_db.init(engine) == ["family", "item", "user"]
    assert sorted(inspect(engine).get_table_names()) == ["family", "item", "user"]
    engine.dispose()


def test_main_uses_the_configured_database(init_db):
    assert init_db.main() == 0
    assert "user" in inspect(init_db.engine).get_table_names()
