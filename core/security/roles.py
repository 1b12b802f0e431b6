"""
Role normalization for field security.

Maps free-text role labels (LDAP group names, token claims, rule table
rows) onto the canonical role tokens used by the section policy.
"""
from enum import Enum
from typing import FrozenSet, Iterable


class Role(str, Enum):
    """Canonical application roles."""
    SUPERADMIN = 'superadmin'
    ADMIN = 'admin'
    HR_GENERAL = 'hr_general'
    FINANCE = 'finance'
    DEPARTMENT_REP = 'department_rep'
    EMPLOYEE = 'employee'


ROLES_BY_VALUE = {role.value: role for role in Role}

# Substring -> role, checked in order (first match wins)
ROLE_PRIORITY = (
    ('super', Role.SUPERADMIN),
    ('admin', Role.ADMIN),
    ('hr', Role.HR_GENERAL),
    ('finance', Role.FINANCE),
    ('dep', Role.DEPARTMENT_REP),
    ('employee', Role.EMPLOYEE),
)


def role_token(role) -> str:
    """Plain string token for a Role member or an already-normalized string."""
    if isinstance(role, Role):
        return role.value
    return str(role)


def normalize_role(label) -> str:
    """
    Map a free-text role label to a canonical role token.

    Unrecognized labels come back lowered and trimmed so they simply
    fail to match anything downstream.
    """
    text = role_token(label or '').strip().lower()
    if not text:
        return ''
    for needle, role in ROLE_PRIORITY:
        if needle in text:
            return role.value
    return text


def normalize_roles(labels: Iterable) -> FrozenSet[str]:
    """Normalize a list of role labels, dropping empty ones."""
    if labels is None:
        return frozenset()
    if isinstance(labels, str):
        labels = [labels]
    tokens = {normalize_role(label) for label in labels}
    tokens.discard('')
    return frozenset(tokens)


def holds_role(label, roles: Iterable[str]) -> bool:
    """
    True when a stored role label (rule row, catalog name) normalizes to
    one of the canonical `roles`.
    """
    token = normalize_role(label)
    return bool(token) and token in {role_token(role) for role in roles}
