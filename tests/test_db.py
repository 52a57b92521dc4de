from datetime import datetime

import pytest
from sqlalchemy import select

from lidera.config import DatabaseConfig, config
from lidera.db import create_store_engine, documents, get_transaction, init_schema


@pytest.fixture
def engine():
    engine = create_store_engine("sqlite:///:memory:")
    init_schema(engine)
    yield engine
    engine.dispose()


def test_database_url_override():
    assert config.get_database_url() == "sqlite:///:memory:"
    assert DatabaseConfig(url="sqlite:///x.db").build_url() == "sqlite:///x.db"


def test_mysql_url_escapes_password():
    db = DatabaseConfig(host="db", user="app", password="p@ss", database="lidera")
    assert db.build_url() == "mysql+pymysql://app:p%40ss@db:3306/lidera"
    assert db.is_configured()


def test_transaction_rolls_back_on_error(engine):
    with pytest.raises(RuntimeError):
        with get_transaction(engine) as conn:
            conn.execute(documents.insert().values(
                id="x", collection="sectors", company_id="c1", data={"name": "Vendas"},
                created_at=datetime.now(),
                updated_at=datetime.now(),
            ))
            raise RuntimeError("boom")

    with engine.connect() as conn:
        assert conn.execute(select(documents)).fetchall() == []
