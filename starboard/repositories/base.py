"""
Base Repository - Starboard Evaluation API
starboard/repositories/base.py

Base repository class with connection management and common utilities.
"""

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Dict, Generator, List, Optional, Sequence, Union

from snowflake.connector.errors import DatabaseError, InterfaceError, ProgrammingError

from starboard.config import get_settings
from starboard.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    ForeignKeyViolationException,
    RepositoryException,
)
from starboard.services.database import get_connection, open_dict_cursor


def _translate_error(e: Exception) -> RepositoryException:
    error_msg = str(e).upper()
    if "UNIQUE" in error_msg or "DUPLICATE" in error_msg:
        return DuplicateEntityException(str(e))
    if "FOREIGN KEY" in error_msg:
        return ForeignKeyViolationException(str(e))
    return RepositoryException(f"Query error: {e}")


class BaseRepository:
    """Base repository with connection management."""

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """Context manager for database connections."""
        conn = None
        try:
            conn = get_connection()
            yield conn
        except (InterfaceError, sqlite3.InterfaceError) as e:
            raise DatabaseConnectionException(f"Failed to connect to database: {e}")
        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self) -> Generator[Any, None, None]:
        """Context manager for dict cursors with automatic connection cleanup."""
        with self.get_connection() as conn:
            cursor = open_dict_cursor(conn)
            try:
                yield cursor
            finally:
                cursor.close()

    @contextmanager
    def transaction(self) -> Generator[Any, None, None]:
        """
        Cursor whose statements are committed together.

        Rolls back and re-raises as a RepositoryException on database errors.
        """
        with self.get_connection() as conn:
            cursor = open_dict_cursor(conn)
            try:
                yield cursor
                conn.commit()
            except (ProgrammingError, sqlite3.IntegrityError, sqlite3.ProgrammingError) as e:
                conn.rollback()
                raise _translate_error(e)
            except (DatabaseError, sqlite3.DatabaseError) as e:
                conn.rollback()
                raise RepositoryException(f"Database error: {e}")
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def execute_query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        fetch_one: bool = False,
        fetch_all: bool = False,
        commit: bool = False,
    ) -> Optional[Any]:
        """
        Execute a SQL query with error handling.

        Args:
            sql: SQL query string with `?` placeholders
            params: Query parameters
            fetch_one: Return single row
            fetch_all: Return all rows
            commit: Commit transaction after execution

        Returns:
            Query results, or the affected row count
        """
        with self.get_cursor() as cursor:
            try:
                cursor.execute(sql, tuple(params or ()))

                if commit:
                    cursor.connection.commit()

                if fetch_one:
                    return cursor.fetchone()
                elif fetch_all:
                    return cursor.fetchall()

                return cursor.rowcount

            except (ProgrammingError, sqlite3.IntegrityError, sqlite3.ProgrammingError) as e:
                raise _translate_error(e)
            except (DatabaseError, sqlite3.DatabaseError) as e:
                raise RepositoryException(f"Database error: {e}")

    @staticmethod
    def is_snowflake() -> bool:
        return get_settings().DB_BACKEND == "snowflake"

    @staticmethod
    def placeholders(count: int) -> str:
        """`?, ?, ?` for an IN clause of `count` values."""
        if count < 1:
            raise ValueError("IN clause needs at least one value")
        return ", ".join(["?"] * count)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
        """UTC timestamp as a naive ISO string accepted by both backends."""
        if dt is None:
            return None
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt.isoformat(sep=" ")

    def normalize_timestamp(self, dt: Union[datetime, str, None]) -> Optional[datetime]:
        """Ensure timestamp is UTC-aware."""
        if dt is None:
            return None
        if isinstance(dt, str):
            dt = datetime.fromisoformat(dt)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    def normalize_date(self, value: Union[date, datetime, str, None]) -> Optional[date]:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(value[:10])

    def build_update_query(
        self,
        table_name: str,
        update_data: Dict[str, Any],
        where_column: str,
        where_value: Any,
    ) -> tuple[str, List[Any]]:
        """
        Build a dynamic UPDATE query.

        Args:
            table_name: Name of the table
            update_data: Dictionary of column -> value to update
            where_column: Column name for WHERE clause
            where_value: Value for WHERE clause

        Returns:
            Tuple of (sql_string, params_list)
        """
        set_clauses = []
        params = []

        for column, value in update_data.items():
            set_clauses.append(f"{column.upper()} = ?")
            params.append(value)

        params.append(where_value)

        sql = f"""
            UPDATE {table_name}
            SET {', '.join(set_clauses)}
            WHERE {where_column} = ?
        """

        return sql, params

    def build_insert_unless_exists(
        self,
        table_name: str,
        values: Dict[str, Any],
        match_columns: Sequence[str],
    ) -> tuple[str, List[Any]]:
        """
        Build an INSERT that is skipped when a row with the same match_columns exists.

        On Snowflake this is a MERGE, which locks the target table, so two
        concurrent statements for the same key cannot both insert. SQLite
        serializes writers, so an INSERT ... WHERE NOT EXISTS is enough there.

        Args:
            table_name: Name of the table
            values: Dictionary of column -> value to insert
            match_columns: Columns (present in values) identifying an existing row

        Returns:
            Tuple of (sql_string, params_list); the statement affects one row
            when inserted and none when skipped
        """
        columns = [column.upper() for column in values]
        params = list(values.values())
        match = [column.upper() for column in match_columns]

        if self.is_snowflake():
            sql = f"""
                MERGE INTO {table_name} T
                USING (SELECT {', '.join(f'? AS {c}' for c in columns)}) S
                ON {' AND '.join(f'T.{c} = S.{c}' for c in match)}
                WHEN NOT MATCHED THEN INSERT ({', '.join(columns)})
                VALUES ({', '.join(f'S.{c}' for c in columns)})
            """
            return sql, params

        sql = f"""
            INSERT INTO {table_name} ({', '.join(columns)})
            SELECT {self.placeholders(len(columns))}
            WHERE NOT EXISTS (
                SELECT 1 FROM {table_name} WHERE {' AND '.join(f'{c} = ?' for c in match)}
            )
        """
        params.extend(values[column] for column in match_columns)
        return sql, params
