from unittest import mock

from django.test import TestCase

from core.security.schema_probe import SchemaProbe
from core.security.test_utils import create_table


class SchemaProbeTests(TestCase):
    """Tests for table/column discovery"""

    def setUp(self):
        create_table('employee_bank', {'employee_id': 'VARCHAR(50)', 'Account_No': 'VARCHAR(50)'})
        self.probe = SchemaProbe()

    def test_table_exists(self):
        self.assertTrue(self.probe.table_exists('employee_bank'))
        self.assertTrue(self.probe.table_exists('EMPLOYEE_BANK'))
        self.assertFalse(self.probe.table_exists('employee_travel'))

    def test_columns_are_lower_cased(self):
        self.assertEqual(self.probe.columns_of('employee_bank'), {'employee_id', 'account_no'})

    def test_missing_table_has_no_columns(self):
        self.assertEqual(self.probe.columns_of('role_column_access'), set())
        self.assertFalse(self.probe.has_columns('role_column_access', 'role'))

    def test_pick_column(self):
        self.assertEqual(self.probe.pick_column('employee_bank', 'id', 'employee_id'), 'employee_id')
        self.assertIsNone(self.probe.pick_column('employee_bank', 'id'))

    def test_qualified_name(self):
        self.assertEqual(self.probe.qualified('employee_bank'), '"employee_bank"')
        qualified = SchemaProbe(schema='dbo').qualified('employee_bank')
        self.assertEqual(qualified, '"dbo"."employee_bank"')

    def test_failures_report_absent(self):
        probe = SchemaProbe()
        with mock.patch.object(probe.connection.introspection, 'table_names', side_effect=Exception('boom')):
            with self.assertLogs('core.security.schema_probe', level='WARNING'):
                self.assertFalse(probe.table_exists('employee_bank'))
        self.assertEqual(probe.columns_of('employee_bank'), set())

    def test_answers_are_memoised(self):
        self.probe.columns_of('employee_bank')
        with self.assertNumQueries(0):
            self.probe.columns_of('employee_bank')
            self.probe.table_exists('employee_bank')
