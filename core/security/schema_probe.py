"""
Schema discovery for optional rule tables and record tables.

The RBAC tables are provisioned incrementally and differ between
environments, so every lookup first asks the probe what exists.
A probe lives for one request; answers are memoised on the instance.
"""
import logging
from typing import Optional, Set

from django.conf import settings
from django.db import connection as default_connection, transaction

logger = logging.getLogger(__name__)


class SchemaProbe:
    """
    Table / column existence checks that never raise.

    Args:
        connection: Django DB connection (defaults to the default alias)
        schema: Optional schema qualifier (e.g. 'dbo'). When set, lookups go
            through INFORMATION_SCHEMA; otherwise Django introspection is used.
    """

    def __init__(self, connection=None, schema: Optional[str] = None):
        self.connection = connection or default_connection
        if schema is None:
            schema = getattr(settings, 'HRIS_DB_SCHEMA', '') or ''
        self.schema = schema.strip()
        self._tables = None
        self._columns = {}

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def quote(self, name: str) -> str:
        return self.connection.ops.quote_name(name)

    def qualified(self, table: str) -> str:
        """Quoted, schema-qualified table name for use in SQL text."""
        if self.schema:
            return f"{self.quote(self.schema)}.{self.quote(table)}"
        return self.quote(table)

    # ------------------------------------------------------------------
    # Existence checks
    # ------------------------------------------------------------------

    def table_exists(self, name: str) -> bool:
        return str(name).lower() in self._table_names()

    def columns_of(self, table: str) -> Set[str]:
        """Lower-cased column names of a table; empty if absent or on error."""
        key = str(table).lower()
        if key not in self._columns:
            if not self.table_exists(key):
                self._columns[key] = set()
            else:
                self._columns[key] = self._load_columns(table)
        return set(self._columns[key])

    def has_columns(self, table: str, *names: str) -> bool:
        cols = self.columns_of(table)
        return all(name in cols for name in names)

    def pick_column(self, table: str, *candidates: str) -> Optional[str]:
        """First candidate column present on the table, or None."""
        cols = self.columns_of(table)
        for name in candidates:
            if name in cols:
                return name
        return None

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    def _table_names(self) -> Set[str]:
        if self._tables is None:
            try:
                with transaction.atomic(using=self.connection.alias):
                    with self.connection.cursor() as cursor:
                        if self.schema:
                            cursor.execute(
                                "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
                                "WHERE TABLE_SCHEMA = %s",
                                [self.schema],
                            )
                            names = [row[0] for row in cursor.fetchall()]
                        else:
                            names = self.connection.introspection.table_names(cursor)
                self._tables = {str(name).lower() for name in names}
            except Exception as e:
                logger.warning(f"Schema probe could not list tables: {e}")
                self._tables = set()
        return self._tables

    def _load_columns(self, table: str) -> Set[str]:
        try:
            with transaction.atomic(using=self.connection.alias):
                with self.connection.cursor() as cursor:
                    if self.schema:
                        cursor.execute(
                            "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
                            "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s",
                            [self.schema, table],
                        )
                        names = [row[0] for row in cursor.fetchall()]
                    else:
                        description = self.connection.introspection.get_table_description(cursor, table)
                        names = [info.name for info in description]
            return {str(name).lower() for name in names}
        except Exception as e:
            logger.warning(f"Schema probe could not read columns of {table}: {e}")
            return set()
