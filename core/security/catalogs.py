"""
Role and column catalogs referenced by id from the normalized rule tables.

- roles:          id column role_id | id, name column role | name | role_name | role_display_name
- column_catalog: id column column_id | id, table_name | table, column_name | column

Both catalogs are optional. Lookups match catalog names the same way
stored rule rows are matched (normalized role, canonical section/column),
and id_for() adds a missing entry before returning its id.
"""
from typing import Dict, List, Optional, Tuple

from .conf import rule_table
from .exceptions import CatalogEntryMissing
from .roles import holds_role
from .schema_probe import SchemaProbe
from .sections import ColumnRef

ROLE_ID_COLUMNS = ('role_id', 'id')
ROLE_NAME_COLUMNS = ('role', 'name', 'role_name', 'role_display_name')
COLUMN_ID_COLUMNS = ('column_id', 'id')
TABLE_NAME_COLUMNS = ('table_name', 'table')
COLUMN_NAME_COLUMNS = ('column_name', 'column')


def clean_text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def insert_row(probe: SchemaProbe, table: str, values: Dict):
    q = probe.quote
    names = list(values)
    with probe.connection.cursor() as cursor:
        cursor.execute(
            f"INSERT INTO {probe.qualified(table)} ({', '.join(q(n) for n in names)}) "
            f"VALUES ({', '.join(['%s'] * len(names))})",
            [values[n] for n in names],
        )


class RoleCatalog:
    """The `roles` table: role ids and their display names."""

    def __init__(self, probe: SchemaProbe, table: Optional[str] = None):
        self.probe = probe
        self.table = table or rule_table('roles')

    @property
    def id_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, *ROLE_ID_COLUMNS)

    @property
    def name_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, *ROLE_NAME_COLUMNS)

    def is_present(self) -> bool:
        return bool(self.id_column and self.name_column)

    def entries(self) -> List[Tuple[object, str]]:
        """[(role_id, name)]"""
        if not self.is_present():
            raise CatalogEntryMissing(f"Role catalog {self.table} is not available.", code='ROLE_NOT_FOUND')
        q = self.probe.quote
        with self.probe.connection.cursor() as cursor:
            cursor.execute(
                f"SELECT {q(self.id_column)}, {q(self.name_column)} FROM {self.probe.qualified(self.table)} "
                f"WHERE {q(self.id_column)} IS NOT NULL"
            )
            return [(role_id, clean_text(name)) for role_id, name in cursor.fetchall()]

    def names(self) -> List[str]:
        """Distinct non-empty role names, sorted."""
        if not self.is_present():
            return []
        return sorted({name for _, name in self.entries() if name})

    def ids_for(self, role: str) -> List:
        return [role_id for role_id, name in self.entries() if holds_role(name, [role])]

    def id_for(self, role: str):
        """
        Catalog id of a canonical role. An entry named exactly like the
        role is preferred; the role is added when no entry normalizes to it.
        """
        matches = [(role_id, name) for role_id, name in self.entries() if holds_role(name, [role])]
        for role_id, name in matches:
            if name.lower() == role:
                return role_id
        if matches:
            return matches[0][0]

        insert_row(self.probe, self.table, {self.name_column: role})
        for role_id, name in self.entries():
            if name == role:
                return role_id
        raise CatalogEntryMissing(f"Role '{role}' could not be added to {self.table}.", code='ROLE_NOT_FOUND')


class ColumnCatalog:
    """The `column_catalog` table: column ids per (record table, column)."""

    def __init__(self, probe: SchemaProbe, table: Optional[str] = None):
        self.probe = probe
        self.table = table or rule_table('column_catalog')

    def _columns(self):
        return (
            self.probe.pick_column(self.table, *COLUMN_ID_COLUMNS),
            self.probe.pick_column(self.table, *TABLE_NAME_COLUMNS),
            self.probe.pick_column(self.table, *COLUMN_NAME_COLUMNS),
        )

    def entries(self) -> List[Tuple[object, ColumnRef]]:
        """[(column_id, ColumnRef)]"""
        id_col, table_col, column_col = self._columns()
        if not id_col or not table_col or not column_col:
            raise CatalogEntryMissing(f"Column catalog {self.table} is not available.", code='COLUMN_NOT_FOUND')
        q = self.probe.quote
        with self.probe.connection.cursor() as cursor:
            cursor.execute(
                f"SELECT {q(id_col)}, {q(table_col)}, {q(column_col)} "
                f"FROM {self.probe.qualified(self.table)} WHERE {q(id_col)} IS NOT NULL"
            )
            return [
                (column_id, ColumnRef.of(table, column))
                for column_id, table, column in cursor.fetchall()
                if clean_text(table) and clean_text(column)
            ]

    def ids_for(self, ref: ColumnRef) -> List:
        return [column_id for column_id, known in self.entries() if known == ref]

    def id_for(self, ref: ColumnRef):
        """Catalog id of (section table, column), adding the entry when missing."""
        for column_id in self.ids_for(ref):
            return column_id

        _, table_col, column_col = self._columns()
        insert_row(self.probe, self.table, {
            table_col: ref.section.table or ref.section.token,
            column_col: ref.column,
        })
        for column_id in self.ids_for(ref):
            return column_id
        raise CatalogEntryMissing(f"Column '{ref}' could not be added to {self.table}.", code='COLUMN_NOT_FOUND')
