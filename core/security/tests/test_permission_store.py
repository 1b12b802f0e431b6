from django.test import TestCase

from core.security.permission_store import PermissionRow, PermissionStore
from core.security.schema_probe import SchemaProbe
from core.security.test_utils import create_role_permissions, create_table


class TextualPermissionStoreTests(TestCase):
    """Tests for role_permissions rows carrying role text"""

    def setUp(self):
        create_role_permissions([
            {'role': 'Finance Staff', 'module': 'Reports', 'action': 'view', 'allowed': True},
            {'role': 'admin', 'module': 'users', 'action': 'manage_roles', 'allowed': True},
            {'role': '', 'module': 'users', 'action': 'read', 'allowed': True},
        ])
        self.store = PermissionStore(SchemaProbe())

    def test_list_uses_current_action_names(self):
        self.assertEqual(self.store.list_permissions(), [
            PermissionRow('Finance Staff', 'reports', 'read', True),
            PermissionRow('admin', 'users', 'manage_users', True),
        ])

    def test_role_names(self):
        self.assertEqual(self.store.role_names(), ['Finance Staff', 'admin'])

    def test_upsert_replaces_older_spellings(self):
        replaced = self.store.upsert('finance', 'reports', 'read', False)
        self.assertEqual(replaced, 1)
        rows = PermissionStore(SchemaProbe()).list_permissions()
        self.assertIn(PermissionRow('finance', 'reports', 'read', False), rows)
        self.assertNotIn('Finance Staff', {row.role for row in rows})

    def test_upsert_new_permission(self):
        self.assertEqual(self.store.upsert('hr_general', 'Employees', 'edit', True), 0)
        self.assertIn(
            PermissionRow('hr_general', 'employees', 'update', True),
            PermissionStore(SchemaProbe()).list_permissions(),
        )


class IdPermissionStoreTests(TestCase):
    """Tests for role_permissions rows referencing the roles catalog"""

    def setUp(self):
        create_table(
            'roles',
            {'role_id': 'INTEGER PRIMARY KEY', 'name': 'VARCHAR(50)'},
            [{'role_id': 1, 'name': 'HR General'}],
        )
        create_role_permissions(
            [{'role_id': 1, 'permission_module': 'employees', 'permission_action': 'read', 'is_allowed': True},
             {'role_id': 9, 'permission_module': 'reports', 'permission_action': 'access', 'is_allowed': False}],
            columns={'role_id': 'INTEGER', 'permission_module': 'VARCHAR(50)',
                     'permission_action': 'VARCHAR(50)', 'is_allowed': 'BOOLEAN'},
        )
        self.store = PermissionStore(SchemaProbe())

    def test_role_name_from_catalog(self):
        self.assertTrue(self.store.is_present())
        self.assertEqual(self.store.list_permissions(), [
            PermissionRow('9', 'reports', 'access', False),
            PermissionRow('HR General', 'employees', 'read', True),
        ])

    def test_upsert_adds_catalog_role(self):
        self.store.upsert('employee', 'employees', 'read', True)
        self.assertEqual(self.store.roles.names(), ['HR General', 'employee'])
        self.assertIn(
            PermissionRow('employee', 'employees', 'read', True),
            PermissionStore(SchemaProbe()).list_permissions(),
        )

    def test_upsert_matches_catalog_role(self):
        self.assertEqual(self.store.upsert('hr_general', 'employees', 'view', False), 1)
        self.assertIn(
            PermissionRow('HR General', 'employees', 'read', False),
            PermissionStore(SchemaProbe()).list_permissions(),
        )


class PermissionStoreLayoutTests(TestCase):
    """Tests for optional joins and absent tables"""

    def test_absent_table(self):
        store = PermissionStore(SchemaProbe())
        self.assertFalse(store.is_present())
        self.assertEqual(store.list_permissions(), [])
        self.assertEqual(store.role_names(), [])

    def test_permission_catalog_fills_module_and_action(self):
        create_table(
            'permissions',
            {'permission_id': 'INTEGER', 'module_name': 'VARCHAR(50)', 'action_name': 'VARCHAR(50)'},
            [{'permission_id': 5, 'module_name': 'Employees', 'action_name': 'edit'}],
        )
        create_role_permissions(
            [{'role': 'admin', 'permission_id': 5, 'module': '', 'action': '', 'allowed': True}],
            columns={'role': 'VARCHAR(50)', 'permission_id': 'INTEGER', 'module': 'VARCHAR(50)',
                     'action': 'VARCHAR(50)', 'allowed': 'BOOLEAN'},
        )
        self.assertEqual(
            PermissionStore(SchemaProbe()).list_permissions(),
            [PermissionRow('admin', 'employees', 'update', True)],
        )
