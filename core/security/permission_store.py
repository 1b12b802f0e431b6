"""
Permission Store - stored module/action permissions per role
============================================================

`role_permissions` keeps admin-maintained (role, module, action, allowed)
rows for clients that decide what to show. Its layout differs between
environments:

- role:    [role] text, or [role_id] -> roles catalog
- module:  [module] | [permission_module]
- action:  [action] | [permission_action]
- allowed: [is_allowed] | [allowed]
- optional [permission_id] -> permissions(permission_id, module_name, action_name)
  filling module/action where the row leaves them empty

Actions are reported under their current names (view -> read,
edit -> update, users.manage_roles -> manage_users).
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from django.db import transaction

from .catalogs import RoleCatalog, clean_text, insert_row
from .conf import rule_table
from .override_store import dictfetchall
from .policy import canonical_action
from .roles import holds_role
from .schema_probe import SchemaProbe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionRow:
    role: str
    module: str
    action: str
    allowed: bool

    def as_dict(self) -> Dict:
        return {'role': self.role, 'module': self.module, 'action': self.action, 'allowed': self.allowed}


class PermissionStore:
    """
    Reads and writes `role_permissions`.

    Args:
        probe: SchemaProbe for this request
    """

    def __init__(self, probe: Optional[SchemaProbe] = None, table: Optional[str] = None,
                 permissions_table: Optional[str] = None):
        self.probe = probe or SchemaProbe()
        self.table = table or rule_table('role_permissions')
        self.permissions_table = permissions_table or rule_table('permissions')
        self.roles = RoleCatalog(self.probe)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def role_id_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, 'role_id')

    @property
    def role_text_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, 'role')

    @property
    def module_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, 'module', 'permission_module')

    @property
    def action_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, 'action', 'permission_action')

    @property
    def allowed_column(self) -> Optional[str]:
        return self.probe.pick_column(self.table, 'is_allowed', 'allowed')

    def is_present(self) -> bool:
        return bool(
            self.allowed_column and self.module_column and self.action_column
            and (self.role_id_column or self.role_text_column)
        )

    def _joins_permissions(self) -> bool:
        return (
            'permission_id' in self.probe.columns_of(self.table)
            and self.probe.has_columns(self.permissions_table, 'permission_id', 'module_name', 'action_name')
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_permissions(self) -> List[PermissionRow]:
        """Every stored permission row; an absent or failing table yields []."""
        if not self.is_present():
            return []
        try:
            with transaction.atomic(using=self.probe.connection.alias):
                records = self._select()
        except Exception as e:
            logger.warning(f"Role permissions on {self.table} unavailable: {e}")
            return []

        rows = []
        for record in records:
            role = (
                clean_text(record.get('role_name'))
                or clean_text(record.get('role_text'))
                or clean_text(record.get('role_id'))
            )
            module = clean_text(record.get('module')) or clean_text(record.get('module_name'))
            action = clean_text(record.get('action')) or clean_text(record.get('action_name'))
            if not role or not module or not action:
                continue
            rows.append(PermissionRow(
                role=role,
                module=module.lower(),
                action=canonical_action(module, action),
                allowed=bool(record.get('allowed')),
            ))
        return sorted(rows, key=lambda r: (r.role, r.module, r.action))

    def role_names(self) -> List[str]:
        """Distinct role labels referenced by stored permissions."""
        return sorted({row.role for row in self.list_permissions()})

    def _select(self) -> List[Dict]:
        probe = self.probe
        q = probe.quote
        select = [
            f"p.{q(self.module_column)} AS module",
            f"p.{q(self.action_column)} AS action",
            f"p.{q(self.allowed_column)} AS allowed",
        ]
        joins = []
        if self.role_text_column:
            select.append(f"p.{q(self.role_text_column)} AS role_text")
        if self.role_id_column:
            select.append(f"p.{q(self.role_id_column)} AS role_id")
            if self.roles.is_present():
                select.append(f"r.{q(self.roles.name_column)} AS role_name")
                joins.append(
                    f"LEFT JOIN {probe.qualified(self.roles.table)} r "
                    f"ON r.{q(self.roles.id_column)} = p.{q(self.role_id_column)}"
                )
        if self._joins_permissions():
            select.append(f"perms.{q('module_name')} AS module_name")
            select.append(f"perms.{q('action_name')} AS action_name")
            joins.append(
                f"LEFT JOIN {probe.qualified(self.permissions_table)} perms "
                f"ON perms.{q('permission_id')} = p.{q('permission_id')}"
            )

        sql = f"SELECT {', '.join(select)} FROM {probe.qualified(self.table)} p {' '.join(joins)}"
        with probe.connection.cursor() as cursor:
            cursor.execute(sql)
            return dictfetchall(cursor)

    # ------------------------------------------------------------------
    # Writes (run inside the caller's transaction)
    # ------------------------------------------------------------------

    def upsert(self, role: str, module: str, action: str, allowed: bool) -> int:
        """
        Replace the stored permission of `role` for (module, action).

        Rows are matched on the normalized role, the lower-cased module and
        the current action name, so older spellings are replaced as well.

        Returns:
            int: number of replaced rows
        """
        module = clean_text(module).lower()
        action = canonical_action(module, action)
        q = self.probe.quote
        target = self.probe.qualified(self.table)

        if self.role_id_column:
            role_key = self.role_id_column
            role_value = self.roles.id_for(role)
            role_ids = set(self.roles.ids_for(role))

            def matches_role(value):
                return value in role_ids
        else:
            role_key = self.role_text_column
            role_value = role

            def matches_role(value):
                return holds_role(value, [role])

        key = [role_key, self.module_column, self.action_column]
        with self.probe.connection.cursor() as cursor:
            cursor.execute(f"SELECT {', '.join(q(c) for c in key)} FROM {target}")
            stale = [
                row for row in cursor.fetchall()
                if matches_role(row[0])
                and clean_text(row[1]).lower() == module
                and canonical_action(row[1], row[2]) == action
            ]
            for row in stale:
                cursor.execute(
                    f"DELETE FROM {target} WHERE {' AND '.join(f'{q(c)} = %s' for c in key)}",
                    list(row),
                )

        insert_row(self.probe, self.table, {
            role_key: role_value,
            self.module_column: module,
            self.action_column: action,
            self.allowed_column: bool(allowed),
        })
        logger.info(f"Permission {role} {module}.{action}: allowed={bool(allowed)} (replaced {len(stale)} row(s))")
        return len(stale)
