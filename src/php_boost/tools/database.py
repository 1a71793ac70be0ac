"""Database introspection tools.

DatabaseSchema, DatabaseQuery and TableDDL read the database described by
the ``database`` block of the configuration. Only SQLite databases are
introspected; every call opens its own read-only connection.
"""

from __future__ import annotations

import re
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from php_boost.tools.base import Tool, ToolArgumentError, ToolExecutionError
from php_boost.tools.result import ToolResult

WRITE_KEYWORDS = re.compile(
    r"\b(INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|TRUNCATE|REPLACE|ATTACH|DETACH|PRAGMA|VACUUM)\b",
    re.IGNORECASE,
)
SQLITE_OBJECT_TYPES = ("table", "view", "index", "trigger")


class SqliteTool(Tool):
    """Base for tools that read the configured SQLite database."""

    def _database_path(self) -> Path:
        driver = self.get_config("database.driver", "")
        if driver != "sqlite":
            raise ToolExecutionError(f"Database driver not supported: {driver or 'none'}")

        database = self.get_config("database.database", "")
        if not database:
            raise ToolExecutionError("Database not configured")

        path = Path(str(database))
        if not path.is_absolute():
            path = Path(self.resolve_base_path({})) / path
        if not path.is_file():
            raise ToolExecutionError(f"Database file not found: {path}")
        return path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        path = self._database_path()
        try:
            conn = sqlite3.connect(f"file:{path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise ToolExecutionError(f"Database connection failed: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _object_names(self, conn: sqlite3.Connection, object_type: str) -> list[str]:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = ? AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name",
            (object_type,),
        ).fetchall()
        return [row["name"] for row in rows]


class DatabaseSchema(SqliteTool):
    """List tables, or the columns of one table."""

    name = "DatabaseSchema"
    description = "Get database schema information (tables, columns, indexes)"
    input_schema = {
        "type": "object",
        "properties": {
            "table": {
                "type": "string",
                "description": "Specific table name (optional, returns all tables if not provided)",
            },
        },
    }

    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        self.validate_arguments(arguments)
        start = time.perf_counter()
        table = arguments.get("table")

        with self._connect() as conn:
            if not table:
                tables = self._object_names(conn, "table")
                return ToolResult.success(
                    self.name,
                    f"{len(tables)} tables found",
                    data={"tables": tables},
                    meta={"duration_ms": round((time.perf_counter() - start) * 1000)},
                )

            if table not in self._object_names(conn, "table"):
                return ToolResult.warning(
                    self.name,
                    f"Table '{table}' not found",
                    data={"table": table, "columns": [], "indexes": []},
                )

            quoted = '"' + str(table).replace('"', '""') + '"'
            columns = [
                {
                    "name": row["name"],
                    "type": row["type"],
                    "nullable": not row["notnull"],
                    "default": row["dflt_value"],
                    "primary_key": bool(row["pk"]),
                }
                for row in conn.execute(f"PRAGMA table_info({quoted})")
            ]
            indexes = [
                {"name": row["name"], "unique": bool(row["unique"])}
                for row in conn.execute(f"PRAGMA index_list({quoted})")
            ]

        return ToolResult.success(
            self.name,
            f"Table '{table}' has {len(columns)} columns",
            data={"table": table, "columns": columns, "indexes": indexes},
            meta={"duration_ms": round((time.perf_counter() - start) * 1000)},
        )


class DatabaseQuery(SqliteTool):
    """Run a read-only SELECT statement."""

    name = "DatabaseQuery"
    description = "Execute read-only SQL queries (SELECT only)"
    input_schema = {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "SQL query to execute (SELECT only)",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of rows to return",
                "default": 100,
            },
        },
        "required": ["query"],
    }

    @staticmethod
    def validate_query(query: str) -> str:
        """Reject anything that is not a single read-only statement.

        Raises:
            ToolArgumentError: If the query could modify the database.
        """
        query = query.strip().rstrip(";").strip()
        first_word = query.split(None, 1)[0].upper() if query else ""
        if first_word not in ("SELECT", "WITH"):
            raise ToolArgumentError("Only SELECT queries are allowed")
        if WRITE_KEYWORDS.search(query) or ";" in query:
            raise ToolArgumentError("Only SELECT queries are allowed")
        return query

    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        self.validate_arguments(arguments)
        query = self.validate_query(arguments["query"])
        limit = self.int_argument(arguments, "limit", 100)
        if limit < 1:
            raise ToolArgumentError("Argument 'limit' must be positive")

        start = time.perf_counter()
        with self._connect() as conn:
            try:
                cursor = conn.execute(query)
                rows = cursor.fetchmany(limit + 1)
            except sqlite3.Error as e:
                raise ToolExecutionError(f"Query failed: {e}") from e

        truncated = len(rows) > limit
        records = [dict(row) for row in rows[:limit]]
        meta = {
            "duration_ms": round((time.perf_counter() - start) * 1000),
            "limit": limit,
            "truncated": truncated,
        }
        data = {"rows": records, "count": len(records)}

        if truncated:
            return ToolResult.warning(
                self.name,
                f"Result truncated to {limit} rows",
                data=data,
                meta=meta,
            )
        return ToolResult.success(self.name, f"{len(records)} rows returned", data=data, meta=meta)


class TableDDL(SqliteTool):
    """Return the stored DDL of a schema object."""

    name = "TableDDL"
    description = "Return real DDL for table/view/index/trigger"
    input_schema = {
        "type": "object",
        "properties": {
            "object_type": {"type": "string", "enum": list(SQLITE_OBJECT_TYPES)},
            "name": {"type": "string"},
        },
        "required": ["object_type", "name"],
    }

    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        self.validate_arguments(arguments)
        object_type = arguments["object_type"]
        object_name = arguments["name"]

        with self._connect() as conn:
            row = conn.execute(
                "SELECT sql FROM sqlite_master WHERE type = ? AND name = ?",
                (object_type, object_name),
            ).fetchone()

        ddl = row["sql"] if row is not None and row["sql"] else ""
        data = {
            "ddl": ddl,
            "resolved_object": {"type": object_type, "name": object_name},
        }
        if not ddl:
            return ToolResult.warning(
                self.name,
                f"No DDL found for {object_type} '{object_name}'",
                data=data,
            )
        return ToolResult.success(self.name, f"DDL for {object_type} '{object_name}'", data=data)
