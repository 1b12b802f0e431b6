"""
API Tests for column rule endpoints.
"""
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.security.override_store import OverrideStore
from core.security.policy import Operation
from core.security.sections import ColumnRef
from core.security.schema_probe import SchemaProbe
from core.security.test_utils import bearer_token, create_normalized_rules, create_textual_rules


class ColumnRuleAPITest(TestCase):
    """Test GET/POST /hr/rbac/columns/"""

    def setUp(self):
        self.client = APIClient()
        self.url = reverse('hr:employee_records:column_rules')

    def authenticate(self, *roles):
        self.client.credentials(HTTP_AUTHORIZATION=bearer_token(roles))

    def test_list_rules(self):
        create_textual_rules([
            {'role': 'finance', 'section': 'Employee Bank', 'column': 'Account_No', 'can_read': True, 'can_write': False},
        ])
        self.authenticate('employee')
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data'], [{
            'role': 'finance', 'section': 'bank', 'column': 'account_no',
            'can_read': True, 'can_write': False,
        }])

    def test_list_without_tables(self):
        self.authenticate('admin')
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data'], [])

    def test_post_requires_admin(self):
        create_textual_rules()
        self.authenticate('hr_general')
        response = self.client.post(self.url, {
            'role': 'finance', 'section': 'bank', 'column': 'account_no', 'can_read': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['code'], 'ROLE_REQUIRED')

    def test_post_replaces_existing_spellings(self):
        create_textual_rules([
            {'role': 'HR', 'section': 'Employee Contact', 'column': 'Phone', 'can_read': True, 'can_write': True},
        ])
        self.authenticate('Super Admin')
        response = self.client.post(self.url, {
            'role': 'hr general', 'section': 'contact', 'column': 'phone', 'can_read': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['role'], 'hr_general')

        rules = OverrideStore(['hr_general'], Operation.READ).load()
        ref = ColumnRef.of('contact', 'phone')
        self.assertTrue(rules.has_rule(ref))
        self.assertFalse(rules.is_granted(ref))
        self.assertEqual(len(OverrideStore.list_rules()), 1)

    def test_write_implies_read(self):
        create_textual_rules()
        self.authenticate('admin')
        response = self.client.post(self.url, {
            'role': 'finance', 'section': 'dbo.employee_travel', 'column': 'passport_no', 'can_write': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        rule = response.json()['data']
        self.assertEqual(rule['section'], 'travel')
        self.assertTrue(rule['can_read'])
        self.assertTrue(rule['can_write'])

    def test_post_validates_role_and_section(self):
        create_textual_rules()
        self.authenticate('admin')
        response = self.client.post(self.url, {
            'role': 'auditor', 'section': 'payroll', 'column': 'salary',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        message = response.json()['message']
        self.assertIn('role', message)
        self.assertIn('section', message)

    def test_post_without_rule_table(self):
        self.authenticate('admin')
        response = self.client.post(self.url, {
            'role': 'finance', 'section': 'bank', 'column': 'account_no',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()['code'], 'RULE_TABLE_UNAVAILABLE')


class NormalizedColumnRuleAPITest(TestCase):
    """POST /hr/rbac/columns/ against the id-based rule layout"""

    def setUp(self):
        self.client = APIClient()
        self.url = reverse('hr:employee_records:column_rules')
        self.client.credentials(HTTP_AUTHORIZATION=bearer_token(['admin']))
        create_normalized_rules(
            roles=[(1, 'Finance Staff')],
            catalog=[(10, 'employee_bank', 'Account_No')],
            rows=[{'role_id': 1, 'column_id': 10, 'can_view': True, 'can_edit': True}],
        )

    def test_post_replaces_row_by_catalog_ids(self):
        response = self.client.post(self.url, {
            'role': 'finance', 'section': 'bank', 'column': 'account_no', 'can_read': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        with SchemaProbe().connection.cursor() as cursor:
            cursor.execute('SELECT "role_id", "column_id", "can_view", "can_edit" FROM "role_column_access"')
            self.assertEqual([tuple(row) for row in cursor.fetchall()], [(1, 10, False, False)])

        rules = OverrideStore(['finance'], Operation.READ).load()
        ref = ColumnRef.of('bank', 'account_no')
        self.assertTrue(rules.has_rule(ref))
        self.assertFalse(rules.is_granted(ref))

    def test_post_adds_missing_catalog_entries(self):
        response = self.client.post(self.url, {
            'role': 'employee', 'section': 'Employee Travel', 'column': 'Passport_No', 'can_read': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        with SchemaProbe().connection.cursor() as cursor:
            cursor.execute('SELECT "name" FROM "roles" ORDER BY "role_id"')
            self.assertEqual([row[0] for row in cursor.fetchall()], ['Finance Staff', 'employee'])
            cursor.execute('SELECT "table_name", "column_name" FROM "column_catalog" ORDER BY "column_id"')
            self.assertEqual(cursor.fetchall()[-1], ('employee_travel', 'passport_no'))

        rules = OverrideStore(['employee'], Operation.READ).load()
        self.assertTrue(rules.is_granted(ColumnRef.of('travel', 'passport_no')))
        self.assertEqual(len(OverrideStore.list_rules()), 2)
