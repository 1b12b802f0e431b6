from django.test import SimpleTestCase, TestCase, override_settings

from core.security.schema_probe import SchemaProbe
from core.security.sections import ColumnRef
from core.security.test_utils import create_type_denials, insert_rows
from core.security.type_denylist import RecordCategory, TypeDenylist, categorize


class CategorizeTests(SimpleTestCase):
    """Tests for record categorization"""

    def test_known_spellings(self):
        self.assertEqual(categorize('Indonesia'), RecordCategory.INDONESIA)
        self.assertEqual(categorize('WNI'), RecordCategory.INDONESIA)
        self.assertEqual(categorize('foreign'), RecordCategory.EXPAT)
        self.assertEqual(categorize('Expatriate'), RecordCategory.EXPAT)

    def test_nationalities(self):
        self.assertEqual(categorize('Indonesian citizen'), RecordCategory.INDONESIA)
        self.assertEqual(categorize('China'), RecordCategory.EXPAT)

    def test_empty_is_unrecognized(self):
        self.assertIsNone(categorize(None))
        self.assertIsNone(categorize('  '))


class TypeDenylistTests(TestCase):
    """Tests for the category-scoped denylist"""

    def setUp(self):
        create_type_denials([
            {'employee_type': 'foreign', 'section': 'employment', 'column': 'blacklist_mti', 'accessible': False},
            {'employee_type': 'expat', 'section': 'Employee Travel', 'column': 'KITAS_No', 'accessible': None},
            {'employee_type': 'expat', 'section': 'bank', 'column': 'account_no', 'accessible': True},
            {'employee_type': 'indonesia', 'section': 'core', 'column': 'ktp_no', 'accessible': False},
        ])
        self.probe = SchemaProbe()

    def test_denials_for_category(self):
        denied = TypeDenylist(RecordCategory.EXPAT, probe=self.probe).load()
        self.assertEqual(denied, frozenset({
            ColumnRef.of('employment', 'blacklist_mti'),
            ColumnRef.of('travel', 'kitas_no'),
        }))

    def test_accessible_rows_never_deny(self):
        denied = TypeDenylist('expat', probe=self.probe).load()
        self.assertNotIn(ColumnRef.of('bank', 'account_no'), denied)

    def test_other_category_unaffected(self):
        denied = TypeDenylist(RecordCategory.INDONESIA, probe=self.probe).load()
        self.assertEqual(denied, frozenset({ColumnRef.of('core', 'ktp_no')}))

    def test_unrecognized_category_uses_broadest_denylist(self):
        with self.assertLogs('core.security.type_denylist', level='INFO'):
            denied = TypeDenylist(None, probe=self.probe).load()
        self.assertEqual(denied, TypeDenylist(RecordCategory.EXPAT, probe=SchemaProbe()).load())

    @override_settings(HRIS_FALLBACK_CATEGORY='indonesia')
    def test_tie_uses_fallback_category(self):
        insert_rows('type_column_access', [
            {'employee_type': 'indonesia', 'section': 'core', 'column': 'npwp', 'accessible': False},
        ])

        denied = TypeDenylist(None, probe=SchemaProbe()).load()
        self.assertIn(ColumnRef.of('core', 'npwp'), denied)

    def test_unknown_label_filed_under_indonesia(self):
        insert_rows('type_column_access', [
            {'employee_type': 'Permanent', 'section': 'contact', 'column': 'home_address', 'accessible': False},
        ])
        with self.assertLogs('core.security.type_denylist', level='DEBUG') as logs:
            by_category = TypeDenylist(None, probe=SchemaProbe()).load_all()
        self.assertIn(ColumnRef.of('contact', 'home_address'), by_category[RecordCategory.INDONESIA])
        self.assertNotIn(ColumnRef.of('contact', 'home_address'), by_category[RecordCategory.EXPAT])
        self.assertTrue(any('Permanent' in line for line in logs.output))

    def test_missing_table(self):
        with self.probe.connection.cursor() as cursor:
            cursor.execute('DROP TABLE "type_column_access"')
        self.assertEqual(TypeDenylist(RecordCategory.EXPAT, probe=SchemaProbe()).load(), frozenset())
