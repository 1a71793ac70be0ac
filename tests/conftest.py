"""Shared fixtures for php-boost tests."""

import sqlite3
from pathlib import Path

import pytest

CONFIG_YAML = """
server:
  name: php-boost-test
database:
  driver: sqlite
  database: app.sqlite
tools:
  enabled: []
  timeout: 0
"""


@pytest.fixture
def sqlite_db(tmp_path: Path) -> Path:
    """Create a small SQLite database with a table, an index and a view."""
    db_path = tmp_path / "app.sqlite"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            email TEXT NOT NULL,
            name TEXT DEFAULT 'anonymous'
        );
        CREATE UNIQUE INDEX users_email_unique ON users (email);
        CREATE VIEW active_users AS SELECT id, email FROM users;
        INSERT INTO users (email, name) VALUES ('a@example.com', 'Ana');
        INSERT INTO users (email, name) VALUES ('b@example.com', 'Bruno');
        INSERT INTO users (email, name) VALUES ('c@example.com', 'Carla');
        """
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def db_config(tmp_path: Path, sqlite_db: Path) -> dict:
    """Tool configuration pointing at the test database."""
    return {
        "base_path": str(tmp_path),
        "database": {"driver": "sqlite", "database": str(sqlite_db)},
    }


@pytest.fixture
def config_file(tmp_path: Path, sqlite_db: Path) -> Path:
    """Write a YAML config whose relative paths resolve against tmp_path."""
    path = tmp_path / "boost.yaml"
    path.write_text(CONFIG_YAML + f"base_path: {tmp_path}\n")
    return path
