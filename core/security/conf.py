"""
Field security settings with their defaults.

    HRIS_RULE_TABLES = {
        'role_column_access': 'role_column_access',
        'roles': 'roles',
        'column_catalog': 'column_catalog',
        'type_column_access': 'type_column_access',
        'role_permissions': 'role_permissions',
        'permissions': 'permissions',
        'login': 'login',
    }
    HRIS_CATEGORY_FIELD = ('core', 'nationality')
    HRIS_FALLBACK_CATEGORY = 'expat'
"""
from django.conf import settings

DEFAULT_RULE_TABLES = {
    'role_column_access': 'role_column_access',
    'roles': 'roles',
    'column_catalog': 'column_catalog',
    'type_column_access': 'type_column_access',
    'role_permissions': 'role_permissions',
    'permissions': 'permissions',
    'login': 'login',
}


def rule_table(key: str) -> str:
    configured = getattr(settings, 'HRIS_RULE_TABLES', None) or {}
    return configured.get(key, DEFAULT_RULE_TABLES[key])


def category_field():
    """(section, column) of the record field that decides its category."""
    return tuple(getattr(settings, 'HRIS_CATEGORY_FIELD', ('core', 'nationality')))


def fallback_category() -> str:
    return getattr(settings, 'HRIS_FALLBACK_CATEGORY', 'expat')
