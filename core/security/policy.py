"""
Compiled Section and Module Policy - Hardcoded Setup
====================================================

Default section access per role, used whenever no stored override rule
exists for a column:
- 2 operations: read, write
- 9 record sections: core, contact, employment, onboard, bank, insurance,
  travel, checklist, notes
- 6 roles: superadmin, admin, hr_general, finance, department_rep, employee

Module permissions per role (employees CRUD, user management, reports)
are compiled the same way into a ModulePolicy.

These tables are code-level configuration, not runtime data. The resolver
receives a SectionPolicy instance instead of importing DEFAULT_POLICY so
tests can substitute their own.
"""
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable

from .roles import Role, normalize_role, role_token
from .sections import ALL_SECTIONS, Section


class Operation(str, Enum):
    READ = 'read'
    WRITE = 'write'


# ============================================================================
# DEFAULT SECTION ACCESS
# ============================================================================

SECTION_READ = {
    Role.SUPERADMIN: list(ALL_SECTIONS),
    Role.ADMIN: list(ALL_SECTIONS),
    Role.HR_GENERAL: ['core', 'contact', 'employment', 'onboard', 'checklist', 'notes'],
    Role.FINANCE: ['core', 'bank', 'insurance'],
    Role.DEPARTMENT_REP: ['core', 'employment'],
    Role.EMPLOYEE: ['core'],
}

SECTION_WRITE = {
    Role.SUPERADMIN: list(ALL_SECTIONS),
    Role.ADMIN: list(ALL_SECTIONS),
    Role.HR_GENERAL: ['contact', 'employment', 'notes'],
    Role.FINANCE: ['bank', 'insurance'],
    Role.DEPARTMENT_REP: [],
    Role.EMPLOYEE: [],
}


def _compile(table: Dict) -> MappingProxyType:
    compiled = {}
    for role, sections in table.items():
        key = normalize_role(role)
        compiled[key] = frozenset(Section.of(s) for s in sections)
    return MappingProxyType(compiled)


class SectionPolicy:
    """
    Immutable role -> sections tables, one per operation.

    Args:
        read: {role: [section, ...]} for reads
        write: {role: [section, ...]} for writes
    """

    def __init__(self, read: Dict, write: Dict):
        self._tables = MappingProxyType({
            Operation.READ: _compile(read),
            Operation.WRITE: _compile(write),
        })

    def sections_for(self, roles: Iterable[str], op) -> FrozenSet[Section]:
        """Union of default sections across every role in the set."""
        table = self._tables[Operation(op)]
        sections = set()
        for role in roles:
            sections.update(table.get(role_token(role), frozenset()))
        return frozenset(sections)

    def allows(self, roles: Iterable[str], op, section) -> bool:
        return Section.of(section) in self.sections_for(roles, op)


DEFAULT_POLICY = SectionPolicy(read=SECTION_READ, write=SECTION_WRITE)


# ============================================================================
# MODULE PERMISSIONS
# ============================================================================

class Modules:
    """Module identifiers."""
    EMPLOYEES = 'employees'
    USERS = 'users'
    REPORTS = 'reports'


class Actions:
    """Action identifiers."""
    READ = 'read'
    CREATE = 'create'
    UPDATE = 'update'
    DELETE = 'delete'
    MANAGE_USERS = 'manage_users'
    ACCESS = 'access'
    EXPORT = 'export'


# Stored permission rows use these older action names
ACTION_ALIASES = {
    'view': Actions.READ,
    'edit': Actions.UPDATE,
    'manage_roles': Actions.MANAGE_USERS,
}


def canonical_action(module, action) -> str:
    text = str(action or '').strip().lower()
    if text == 'manage_roles' and str(module or '').strip().lower() != Modules.USERS:
        return text
    return ACTION_ALIASES.get(text, text)


def _crud(read=False, create=False, update=False, delete=False):
    return {Actions.READ: read, Actions.CREATE: create, Actions.UPDATE: update, Actions.DELETE: delete}


MODULE_PERMISSIONS = {
    Role.SUPERADMIN: {
        Modules.EMPLOYEES: _crud(read=True, create=True, update=True, delete=True),
        Modules.USERS: {Actions.MANAGE_USERS: True},
        Modules.REPORTS: {Actions.ACCESS: True, Actions.EXPORT: True},
    },
    Role.ADMIN: {
        Modules.EMPLOYEES: _crud(read=True, create=True, update=True),
        Modules.USERS: {Actions.MANAGE_USERS: True},
        Modules.REPORTS: {Actions.ACCESS: True, Actions.EXPORT: True},
    },
    Role.HR_GENERAL: {
        Modules.EMPLOYEES: _crud(read=True),
        Modules.USERS: {Actions.MANAGE_USERS: False},
        Modules.REPORTS: {Actions.ACCESS: True, Actions.EXPORT: False},
    },
    Role.FINANCE: {
        Modules.EMPLOYEES: _crud(read=True),
        Modules.USERS: {Actions.MANAGE_USERS: False},
        Modules.REPORTS: {Actions.ACCESS: True, Actions.EXPORT: True},
    },
    Role.DEPARTMENT_REP: {
        Modules.EMPLOYEES: _crud(read=True),
        Modules.USERS: {Actions.MANAGE_USERS: False},
        Modules.REPORTS: {Actions.ACCESS: True, Actions.EXPORT: False},
    },
    Role.EMPLOYEE: {
        Modules.EMPLOYEES: _crud(read=True),
        Modules.USERS: {Actions.MANAGE_USERS: False},
        Modules.REPORTS: {Actions.ACCESS: False, Actions.EXPORT: False},
    },
}


class ModulePolicy:
    """
    Immutable role -> {(module, action): allowed} table.

    A role set is allowed an action when any of its roles is. Unknown
    roles, modules and actions are denied.

    Args:
        table: {role: {module: {action: bool}}}
    """

    def __init__(self, table: Dict):
        compiled = {}
        for role, modules in table.items():
            compiled[normalize_role(role)] = MappingProxyType({
                (str(module), str(action)): bool(allowed)
                for module, actions in modules.items()
                for action, allowed in actions.items()
            })
        self._table = MappingProxyType(compiled)

    def _allowed(self, role, module, action) -> bool:
        return self._table.get(role_token(role), {}).get((module, action), False)

    def can(self, roles: Iterable[str], module, action) -> bool:
        module = str(module or '').strip().lower()
        action = canonical_action(module, action)
        return any(self._allowed(role, module, action) for role in roles)

    def can_manage_users(self, roles: Iterable[str], target_role=None) -> bool:
        """
        Whether the roles may manage users (and their permissions).
        Only a superadmin may manage a superadmin target.
        """
        target = normalize_role(target_role) if target_role else ''
        for role in roles:
            token = role_token(role)
            if not self._allowed(token, Modules.USERS, Actions.MANAGE_USERS):
                continue
            if target == Role.SUPERADMIN.value and token != Role.SUPERADMIN.value:
                continue
            return True
        return False

    def can_create_role(self, roles: Iterable[str], new_role) -> bool:
        if normalize_role(new_role) == Role.SUPERADMIN.value:
            return Role.SUPERADMIN.value in {role_token(role) for role in roles}
        return any(self._allowed(role, Modules.USERS, Actions.MANAGE_USERS) for role in roles)

    def can_access_report(self, roles: Iterable[str]) -> bool:
        return self.can(roles, Modules.REPORTS, Actions.ACCESS)

    def can_export_report(self, roles: Iterable[str]) -> bool:
        return self.can(roles, Modules.REPORTS, Actions.EXPORT)

    def permissions_for(self, roles: Iterable[str]) -> Dict[str, Dict[str, bool]]:
        """{module: {action: allowed}} for the role set, over every known pair."""
        roles = list(roles)
        pairs = sorted({pair for actions in self._table.values() for pair in actions})
        result = {}
        for module, action in pairs:
            result.setdefault(module, {})[action] = any(self._allowed(role, module, action) for role in roles)
        return result


DEFAULT_MODULE_POLICY = ModulePolicy(MODULE_PERMISSIONS)
