"""Pytest configuration helpers."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import text

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep WITHOVER_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("WITHOVER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sqlite_db(tmp_path):
    """Create a temporary SQLite database for testing."""
    from withover import connect

    db_path = tmp_path / "test.db"
    # Use as_posix() to ensure forward slashes for SQLite URLs (required on Windows)
    db = connect(f"sqlite:///{db_path.as_posix()}")
    yield db
    db.close()


@pytest.fixture
def users_db(sqlite_db):
    """SQLite database with a ``users`` table holding duplicate unionids."""
    rows = [
        {"id": 1, "unionid": "u1", "name": "Alice", "amount": 10, "created_at": "2024-01-01"},
        {"id": 2, "unionid": "u1", "name": "Alice v2", "amount": 20, "created_at": "2024-02-01"},
        {"id": 3, "unionid": "u2", "name": "Bob", "amount": 5, "created_at": "2024-01-15"},
        {"id": 4, "unionid": "u3", "name": "Carol", "amount": 7, "created_at": "2024-03-01"},
        {"id": 5, "unionid": "u2", "name": "Bob v2", "amount": 15, "created_at": "2023-12-01"},
    ]
    with sqlite_db.connection_manager.connect() as conn:
        conn.execute(
            text(
                "CREATE TABLE users (id INTEGER PRIMARY KEY, unionid TEXT NOT NULL, "
                "name TEXT, amount INTEGER, created_at TEXT)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO users (id, unionid, name, amount, created_at) "
                "VALUES (:id, :unionid, :name, :amount, :created_at)"
            ),
            rows,
        )
    return sqlite_db
