"""Infrastructure fixtures - throwaway SQLite databases and bootstrap scripts.

Invariants:
    - Every test gets its own database file under tmp_path
    - Scripts mirror the packaged ones' shape (directives included) in SQLite syntax
"""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

SCHEMA_SQL = """-- test schema
CREATE DATABASE IF NOT EXISTS shop;
USE shop;

CREATE TABLE categories (
    id INTEGER PRIMARY KEY,
    name VARCHAR(100) NOT NULL UNIQUE
);

CREATE TABLE products (
    id INTEGER PRIMARY KEY,
    category_id INTEGER REFERENCES categories(id),
    name VARCHAR(255) NOT NULL,
    price DECIMAL(10, 2) NOT NULL
);
"""

SEED_SQL = """USE shop;

INSERT INTO categories (id, name) VALUES (1, 'Home; Garden'), (2, 'Books');
INSERT INTO products (category_id, name, price) VALUES
    (1, 'Chef''s Knife', 49.00),
    (2, 'Learning SQL', 34.99),
    (2, 'SQL Cookbook', 41.50);
"""


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}"


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(SCHEMA_SQL, encoding="utf-8")
    return path


@pytest.fixture
def seed_path(tmp_path):
    path = tmp_path / "seeds.sql"
    path.write_text(SEED_SQL, encoding="utf-8")
    return path


@pytest.fixture
def query(database_url):
    """Run one scalar query against the test database."""
    async def _query(sql: str):
        engine = create_async_engine(database_url)
        try:
            async with engine.connect() as conn:
                return (await conn.execute(text(sql))).scalar()
        finally:
            await engine.dispose()
    return _query
