"""
Database Connections - Starboard Evaluation API
starboard/services/database.py

Connection factories used by the repositories. Snowflake is the production
backend; SQLite serves local development and tests. Both are driven with
qmark (`?`) placeholders so repositories share one SQL dialect.
"""

import sqlite3
from typing import Any, Dict

import snowflake.connector
from snowflake.connector import DictCursor

from starboard.config import get_settings


def _dict_row(cursor: sqlite3.Cursor, row: tuple) -> Dict[str, Any]:
    """Row factory matching Snowflake's DictCursor (uppercase column keys)."""
    return {col[0].upper(): value for col, value in zip(cursor.description, row)}


def get_snowflake_connection():
    """Snowflake connection configured from settings."""
    settings = get_settings()
    snowflake.connector.paramstyle = "qmark"

    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=settings.SNOWFLAKE_PASSWORD.get_secret_value() if settings.SNOWFLAKE_PASSWORD else None,
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE,
    )


def get_sqlite_connection(path: str) -> sqlite3.Connection:
    """SQLite connection returning dict rows."""
    conn = sqlite3.connect(path, timeout=10)
    conn.row_factory = _dict_row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_connection():
    """Open a connection for the configured backend."""
    settings = get_settings()
    if settings.DB_BACKEND == "snowflake":
        return get_snowflake_connection()
    return get_sqlite_connection(settings.SQLITE_PATH)


def open_dict_cursor(conn):
    """Cursor yielding rows as dicts with uppercase keys."""
    if isinstance(conn, sqlite3.Connection):
        return conn.cursor()
    return conn.cursor(DictCursor)


def init_schema() -> None:
    """Create all tables if they do not exist."""
    from starboard.repositories.schema import TABLES

    conn = get_connection()
    try:
        cursor = conn.cursor()
        try:
            for ddl in TABLES:
                cursor.execute(ddl)
            conn.commit()
        finally:
            cursor.close()
    finally:
        conn.close()
