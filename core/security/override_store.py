"""
Override Store - stored per-role / per-column rules
===================================================

Explicit read/write rules live in `role_column_access`, which exists in
two physical layouts, sometimes both at once on the same table:

- Textual:    [role], [section], [column], can_read / can_view, can_write / can_edit
- Normalized: [role_id] -> roles catalog, [column_id] -> column_catalog,
              same flag columns

Each layout is read by its own RuleSource adapter, which turns rows into
RuleRow objects. OverrideStore merges the adapters' output into a RuleMap
for one operation without knowing which layout a rule came from.

Both adapters also write: discard() drops every stored spelling of a
rule and insert() adds the replacement. The normalized adapter resolves
(or adds) the role and column catalog entries first.

Rule presence is what matters: a row for (role, section, column) replaces
the static section default for that exact column, whether it grants or
denies. Any row among the caller's roles that grants wins (OR).
"""
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional

from django.db import transaction

from .catalogs import (
    COLUMN_ID_COLUMNS,
    COLUMN_NAME_COLUMNS,
    ROLE_ID_COLUMNS,
    ROLE_NAME_COLUMNS,
    TABLE_NAME_COLUMNS,
    ColumnCatalog,
    RoleCatalog,
    clean_text,
    insert_row,
)
from .conf import rule_table
from .policy import Operation
from .roles import holds_role, normalize_roles
from .schema_probe import SchemaProbe
from .sections import ColumnRef, Section

logger = logging.getLogger(__name__)

# Flag columns per operation; a row grants if any present flag is true
FLAG_COLUMNS = {
    Operation.READ: ('can_read', 'can_view'),
    Operation.WRITE: ('can_write', 'can_edit'),
}


def dictfetchall(cursor) -> List[Dict]:
    """Return all rows from a cursor as dicts keyed by lower-cased column name."""
    columns = [str(col[0]).lower() for col in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


def _any_flag(row: Dict, flags: Iterable[str]) -> Optional[bool]:
    """OR of the flag values present; None when the layout has no flag for it."""
    present = [f for f in flags if f in row]
    if not present:
        return None
    return any(bool(row[f]) for f in present)


# ============================================================================
# VALUE TYPES
# ============================================================================

@dataclass(frozen=True)
class RuleRow:
    """One stored rule, already canonicalized. read/write are None when the
    layout carries no flag for that operation."""
    role: str
    ref: ColumnRef
    read: Optional[bool]
    write: Optional[bool]

    def flag(self, op) -> Optional[bool]:
        return self.read if Operation(op) == Operation.READ else self.write

    def held_by(self, roles) -> bool:
        return holds_role(self.role, roles)


@dataclass(frozen=True)
class ColumnRule:
    seen: bool = False
    granted: bool = False


class RuleMap:
    """(section, column) -> ColumnRule for one operation."""

    def __init__(self, rules: Optional[Dict[ColumnRef, ColumnRule]] = None):
        self._rules = dict(rules or {})

    @classmethod
    def from_rows(cls, rows: Iterable[RuleRow], op) -> 'RuleMap':
        rule_map = cls()
        for row in rows:
            granted = row.flag(op)
            if granted is not None:
                rule_map.record(row.ref, granted)
        return rule_map

    def record(self, ref: ColumnRef, granted: bool):
        current = self._rules.get(ref)
        already = current.granted if current else False
        self._rules[ref] = ColumnRule(seen=True, granted=already or bool(granted))

    def get(self, ref: ColumnRef) -> Optional[ColumnRule]:
        return self._rules.get(ref)

    def has_rule(self, ref: ColumnRef) -> bool:
        rule = self._rules.get(ref)
        return bool(rule and rule.seen)

    def is_granted(self, ref: ColumnRef) -> bool:
        rule = self._rules.get(ref)
        return bool(rule and rule.granted)

    def merge(self, other: 'RuleMap') -> 'RuleMap':
        """Union of seen, OR of granted."""
        merged = RuleMap(self._rules)
        for ref, rule in other.items():
            if rule.seen:
                merged.record(ref, rule.granted)
        return merged

    def granted_sections(self) -> FrozenSet[Section]:
        return frozenset(ref.section for ref, rule in self._rules.items() if rule.granted)

    def items(self):
        return self._rules.items()

    def __contains__(self, ref) -> bool:
        return ref in self._rules

    def __iter__(self) -> Iterator[ColumnRef]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self):
        return f"RuleMap({len(self._rules)} rules)"


# ============================================================================
# RULE SOURCES
# ============================================================================

class RuleSource:
    """
    One physical layout of the override table.

    Subclasses implement is_present() and _query(). A failing query is
    logged and contributes nothing, so a broken layout can only narrow access.
    """
    layout = 'abstract'

    def __init__(self, probe: SchemaProbe, table: Optional[str] = None):
        self.probe = probe
        self.table = table or rule_table('role_column_access')

    def is_present(self) -> bool:
        raise NotImplementedError

    def _query(self) -> List[RuleRow]:
        raise NotImplementedError

    def rows(self, roles: Optional[FrozenSet[str]] = None) -> List[RuleRow]:
        """
        Stored rules of this layout.

        Stored role text is free-form ("Finance Staff", "Administrator"), so
        it is normalized the same way token roles are before matching.

        Args:
            roles: canonical role tokens to keep; None keeps every row
        """
        if not self.is_present():
            return []
        if roles is not None and not roles:
            return []
        try:
            with transaction.atomic(using=self.probe.connection.alias):
                rows = self._query()
        except Exception as e:
            logger.warning(f"{self.layout} override rules on {self.table} unavailable: {e}")
            return []
        if roles is None:
            return rows
        return [row for row in rows if row.held_by(roles)]

    def _flag_columns(self) -> List[str]:
        cols = self.probe.columns_of(self.table)
        flags = FLAG_COLUMNS[Operation.READ] + FLAG_COLUMNS[Operation.WRITE]
        return [f for f in flags if f in cols]

    # ------------------------------------------------------------------
    # Writes (run inside the caller's transaction)
    # ------------------------------------------------------------------

    def discard(self, role: str, ref: ColumnRef) -> int:
        """Delete every stored rule of `role` for `ref`, whatever its spelling."""
        raise NotImplementedError

    def insert(self, role: str, ref: ColumnRef, can_read: bool, can_write: bool):
        raise NotImplementedError

    def _flag_values(self, can_read: bool, can_write: bool) -> Dict[str, bool]:
        cols = self.probe.columns_of(self.table)
        values = {name: bool(can_read) for name in FLAG_COLUMNS[Operation.READ] if name in cols}
        values.update({name: bool(can_write) for name in FLAG_COLUMNS[Operation.WRITE] if name in cols})
        return values

    @staticmethod
    def _build_row(role, section, column, row) -> Optional[RuleRow]:
        if not role or not section or not column:
            return None
        return RuleRow(
            role=role,
            ref=ColumnRef.of(section, column),
            read=_any_flag(row, FLAG_COLUMNS[Operation.READ]),
            write=_any_flag(row, FLAG_COLUMNS[Operation.WRITE]),
        )


class TextualRuleSource(RuleSource):
    """Rows carrying literal [role], [section], [column] text."""
    layout = 'textual'

    def is_present(self) -> bool:
        return self.probe.has_columns(self.table, 'role', 'section', 'column')

    def _query(self):
        q = self.probe.quote
        flags = self._flag_columns()
        if not flags:
            return []
        select = ', '.join(q(c) for c in ['role', 'section', 'column'] + flags)
        sql = f"SELECT {select} FROM {self.probe.qualified(self.table)} WHERE {q('role')} IS NOT NULL"

        with self.probe.connection.cursor() as cursor:
            cursor.execute(sql)
            records = dictfetchall(cursor)

        rows = []
        for record in records:
            rule = self._build_row(
                clean_text(record.get('role')),
                clean_text(record.get('section')),
                clean_text(record.get('column')),
                record,
            )
            if rule:
                rows.append(rule)
        return rows

    def discard(self, role, ref):
        q = self.probe.quote
        target = self.probe.qualified(self.table)
        with self.probe.connection.cursor() as cursor:
            cursor.execute(
                f"SELECT {q('role')}, {q('section')}, {q('column')} FROM {target} "
                f"WHERE {q('role')} IS NOT NULL"
            )
            stale = [
                row for row in dictfetchall(cursor)
                if holds_role(row['role'], [role])
                and clean_text(row['section']) and clean_text(row['column'])
                and ColumnRef.of(row['section'], row['column']) == ref
            ]
            for row in stale:
                cursor.execute(
                    f"DELETE FROM {target} WHERE {q('role')} = %s AND {q('section')} = %s AND {q('column')} = %s",
                    [row['role'], row['section'], row['column']],
                )
        return len(stale)

    def insert(self, role, ref, can_read, can_write):
        values = {'role': role, 'section': ref.section.token, 'column': ref.column}
        values.update(self._flag_values(can_read, can_write))
        insert_row(self.probe, self.table, values)


class NormalizedRuleSource(RuleSource):
    """
    Rows referencing the roles catalog and the column catalog by id.

    Role text comes from the catalog join, falling back to the row's own
    [role] text and then to the raw role_id. Section/column come from the
    column catalog, falling back to the row's own [section]/[column] text.
    """
    layout = 'normalized'

    def __init__(self, probe: SchemaProbe, table: Optional[str] = None,
                 roles_table: Optional[str] = None, catalog_table: Optional[str] = None):
        super().__init__(probe, table)
        self.roles = RoleCatalog(probe, roles_table)
        self.columns = ColumnCatalog(probe, catalog_table)

    def is_present(self) -> bool:
        return self.probe.has_columns(self.table, 'role_id', 'column_id')

    def _query(self):
        probe = self.probe
        q = probe.quote
        flags = self._flag_columns()
        if not flags:
            return []
        own_cols = probe.columns_of(self.table)

        select = [f"rca.{q('role_id')} AS role_id", f"rca.{q('column_id')} AS column_id"]
        select += [f"rca.{q(f)} AS {f}" for f in flags]
        for fallback in ('role', 'section', 'column'):
            if fallback in own_cols:
                select.append(f"rca.{q(fallback)} AS own_{fallback}")

        joins = []
        role_id_col = probe.pick_column(self.roles.table, *ROLE_ID_COLUMNS)
        role_name_col = probe.pick_column(self.roles.table, *ROLE_NAME_COLUMNS)
        if role_id_col and role_name_col:
            select.append(f"r.{q(role_name_col)} AS role_name")
            joins.append(
                f"LEFT JOIN {probe.qualified(self.roles.table)} r "
                f"ON r.{q(role_id_col)} = rca.{q('role_id')}"
            )

        col_id_col = probe.pick_column(self.columns.table, *COLUMN_ID_COLUMNS)
        table_name_col = probe.pick_column(self.columns.table, *TABLE_NAME_COLUMNS)
        column_name_col = probe.pick_column(self.columns.table, *COLUMN_NAME_COLUMNS)
        if col_id_col and table_name_col and column_name_col:
            select.append(f"cc.{q(table_name_col)} AS table_name")
            select.append(f"cc.{q(column_name_col)} AS column_name")
            joins.append(
                f"LEFT JOIN {probe.qualified(self.columns.table)} cc "
                f"ON cc.{q(col_id_col)} = rca.{q('column_id')}"
            )

        sql = (
            f"SELECT {', '.join(select)} FROM {probe.qualified(self.table)} rca "
            f"{' '.join(joins)} "
            f"WHERE rca.{q('role_id')} IS NOT NULL AND rca.{q('column_id')} IS NOT NULL"
        )
        with probe.connection.cursor() as cursor:
            cursor.execute(sql)
            records = dictfetchall(cursor)

        rows = []
        for record in records:
            role = clean_text(record.get('role_name')) or clean_text(record.get('own_role')) or clean_text(record.get('role_id'))
            section = clean_text(record.get('table_name')) or clean_text(record.get('own_section'))
            column = clean_text(record.get('column_name')) or clean_text(record.get('own_column'))
            rule = self._build_row(role, section, column, record)
            if rule:
                rows.append(rule)
        return rows

    def discard(self, role, ref):
        role_ids = self.roles.ids_for(role)
        column_ids = self.columns.ids_for(ref)
        if not role_ids or not column_ids:
            return 0

        q = self.probe.quote
        with self.probe.connection.cursor() as cursor:
            cursor.execute(
                f"DELETE FROM {self.probe.qualified(self.table)} "
                f"WHERE {q('role_id')} IN ({', '.join(['%s'] * len(role_ids))}) "
                f"AND {q('column_id')} IN ({', '.join(['%s'] * len(column_ids))})",
                role_ids + column_ids,
            )
            return max(cursor.rowcount, 0)

    def insert(self, role, ref, can_read, can_write):
        values = {'role_id': self.roles.id_for(role), 'column_id': self.columns.id_for(ref)}
        own_cols = self.probe.columns_of(self.table)
        for name, value in (('role', role), ('section', ref.section.token), ('column', ref.column)):
            if name in own_cols:
                values[name] = value
        values.update(self._flag_values(can_read, can_write))
        insert_row(self.probe, self.table, values)


# ============================================================================
# STORE
# ============================================================================

class OverrideStore:
    """
    Override rules for one role set and one operation.

    Build one instance for reads and one for writes per request; load()
    issues one query per present layout.

    Args:
        roles: canonical role tokens
        op: Operation.READ or Operation.WRITE
        probe: SchemaProbe for this request
        sources: RuleSource adapters (textual + normalized by default)
    """

    def __init__(self, roles: Iterable[str], op, probe: Optional[SchemaProbe] = None,
                 sources: Optional[List[RuleSource]] = None):
        self.roles = normalize_roles(roles)
        self.op = Operation(op)
        self.probe = probe or SchemaProbe()
        self.sources = sources if sources is not None else self.default_sources(self.probe)

    @staticmethod
    def default_sources(probe: SchemaProbe) -> List[RuleSource]:
        return [TextualRuleSource(probe), NormalizedRuleSource(probe)]

    def load(self) -> RuleMap:
        merged = RuleMap()
        for source in self.sources:
            merged = merged.merge(RuleMap.from_rows(source.rows(self.roles), self.op))
        logger.debug(f"Loaded {len(merged)} {self.op.value} override rules for roles {sorted(self.roles)}")
        return merged

    @classmethod
    def list_rules(cls, probe: Optional[SchemaProbe] = None) -> List[RuleRow]:
        """Every stored rule from every present layout, unfiltered."""
        probe = probe or SchemaProbe()
        rows = []
        for source in cls.default_sources(probe):
            rows.extend(source.rows())
        return rows
