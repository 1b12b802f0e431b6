"""
Initialize Field Security Rule Tables

Creates the stored rule tables read by the field security layer, or adds
missing columns to tables that already exist:
- role_column_access (textual layout: role, section, column, can_read, can_write)
- type_column_access (employee_type, section, column, accessible)
- role_permissions (role, module, action, allowed)

On role_permissions a column counts as present when the table already
has one of its alternative names (e.g. role_id for role, is_allowed for
allowed).

Usage:
    python manage.py init_rbac_schemas

This is idempotent - safe to run multiple times.
"""

from django.core.management.base import BaseCommand
from django.db import connection

from core.security.conf import rule_table
from core.security.schema_probe import SchemaProbe

# column -> (type, NOT NULL default)
TEXT_COLUMNS = {
    'role': ('VARCHAR(50)', "''"),
    'section': ('VARCHAR(50)', "''"),
    'column': ('VARCHAR(100)', "''"),
    'employee_type': ('VARCHAR(20)', "''"),
    'module': ('VARCHAR(50)', "''"),
    'action': ('VARCHAR(50)', "''"),
}

RULE_TABLE_LAYOUTS = {
    'role_column_access': {
        'columns': ['role', 'section', 'column', 'can_read', 'can_write'],
        'key': ['role', 'section', 'column'],
    },
    'type_column_access': {
        'columns': ['employee_type', 'section', 'column', 'accessible'],
        'key': ['employee_type', 'section', 'column'],
    },
    'role_permissions': {
        'columns': ['role', 'module', 'action', 'allowed'],
        'key': ['role', 'module', 'action'],
        # column -> other names that satisfy it on an existing table
        'alternatives': {
            'role': ('role_id',),
            'module': ('permission_module',),
            'action': ('permission_action',),
            'allowed': ('is_allowed',),
        },
    },
}


def boolean_type():
    """(type, false literal) for the current backend."""
    if connection.vendor == 'microsoft':
        return 'BIT', '0'
    return 'BOOLEAN', 'FALSE'


def column_definition(quote, name: str) -> str:
    if name in TEXT_COLUMNS:
        sql_type, default = TEXT_COLUMNS[name]
    else:
        sql_type, default = boolean_type()
    return f"{quote(name)} {sql_type} NOT NULL DEFAULT {default}"


class Command(BaseCommand):
    help = 'Create or complete the field security rule tables'

    def handle(self, *args, **options):
        self.stdout.write('Ensuring field security rule tables...\n')
        probe = SchemaProbe(connection)

        try:
            for key, layout in RULE_TABLE_LAYOUTS.items():
                table = rule_table(key)
                if not probe.table_exists(table):
                    self._create(probe, table, layout)
                    self.stdout.write(self.style.SUCCESS(f"  ✓ Created table: {table}"))
                    continue

                existing = probe.columns_of(table)
                missing = [
                    c for c in layout['columns']
                    if c not in existing and not existing & set(layout.get('alternatives', {}).get(c, ()))
                ]
                for name in missing:
                    self._execute(
                        f"ALTER TABLE {probe.qualified(table)} ADD {column_definition(probe.quote, name)}"
                    )
                    self.stdout.write(f"    → Added column {name} to {table}")
                if not missing:
                    self.stdout.write(f"  - Table already complete: {table}")

            self.stdout.write(self.style.SUCCESS('\n✅ Rule tables ready\n'))

        except Exception as e:
            self.stdout.write(self.style.ERROR(f'\n❌ Error: {str(e)}\n'))
            raise

    def _create(self, probe, table, layout):
        columns = [column_definition(probe.quote, name) for name in layout['columns']]
        key = ', '.join(probe.quote(name) for name in layout['key'])
        self._execute(
            f"CREATE TABLE {probe.qualified(table)} ({', '.join(columns)}, PRIMARY KEY ({key}))"
        )

    def _execute(self, sql):
        with connection.cursor() as cursor:
            cursor.execute(sql)
