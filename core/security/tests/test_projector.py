from django.test import SimpleTestCase

from core.security.exceptions import NoAcceptedFields, NoWritableSections
from core.security.override_store import RuleMap
from core.security.policy import Operation, SectionPolicy
from core.security.projector import FieldProjector
from core.security.resolver import AccessResolver
from core.security.sections import ColumnRef

RECORD = {
    'core': {'employee_id': 'E001', 'name': 'Sari', 'nationality': 'Indonesia'},
    'contact': {'phone': '0812', 'email': 'sari@example.com'},
    'bank': {'account_no': '123', 'bank_name': 'BCA'},
    'insurance': {'bpjs_tk': 'TK-1'},
    'notes': {},
    'type': 'indonesia',
}


class ReadProjectionTests(SimpleTestCase):
    """Tests for redacted reads"""

    def test_employee_sees_core_only(self):
        projector = FieldProjector(AccessResolver(['employee'], Operation.READ))
        output = projector.project_read(RECORD, passthrough=('type',))
        self.assertEqual(output, {'core': RECORD['core'], 'type': 'indonesia'})

    def test_sections_without_visible_columns_are_omitted(self):
        rules = RuleMap()
        rules.record(ColumnRef.of('bank', 'account_no'), False)
        rules.record(ColumnRef.of('bank', 'bank_name'), False)
        projector = FieldProjector(AccessResolver(['finance'], Operation.READ, rules=rules))
        output = projector.project_read(RECORD)
        self.assertNotIn('bank', output)
        self.assertIn('insurance', output)
        self.assertNotIn('type', output)
        for columns in output.values():
            self.assertTrue(columns)

    def test_empty_sections_dropped_even_for_admin(self):
        output = FieldProjector(AccessResolver(['admin'], Operation.READ)).project_read(RECORD)
        self.assertNotIn('notes', output)
        self.assertEqual(output['contact'], RECORD['contact'])

    def test_section_keys_are_canonicalized(self):
        record = {'Employee Bank': {'Account_No': '123'}}
        output = FieldProjector(AccessResolver(['finance'], Operation.READ)).project_read(record)
        self.assertEqual(output, {'bank': {'Account_No': '123'}})

    def test_wrong_resolver_operation(self):
        with self.assertRaises(ValueError):
            FieldProjector(AccessResolver(['admin'], Operation.WRITE)).project_read(RECORD)


class WriteProjectionTests(SimpleTestCase):
    """Tests for filtered writes"""

    def test_accepts_writable_and_reports_rejected(self):
        projector = FieldProjector(AccessResolver(['finance'], Operation.WRITE))
        projection = projector.project_write({
            'bank': {'account_no': '999'},
            'contact': {'phone': '0813'},
            'core': {'employee_id': 'E002'},
        })
        self.assertEqual(projection.accepted, {'bank': {'account_no': '999'}})
        self.assertEqual(sorted(projection.rejected), ['contact.phone', 'core.employee_id'])
        self.assertEqual(projection.accepted_fields, ['bank.account_no'])

    def test_no_writable_sections(self):
        projector = FieldProjector(AccessResolver(['department_rep'], Operation.WRITE))
        with self.assertRaises(NoWritableSections) as ctx:
            projector.project_write({'core': {'employee_id': 'E001'}, 'insurance': {'bpjs_tk': 'X'}})
        self.assertEqual(ctx.exception.get_codes(), 'NO_SECTION_ACCESS')

    def test_no_accepted_fields(self):
        policy = SectionPolicy(read={}, write={'department_rep': ['employment']})
        projector = FieldProjector(AccessResolver(['department_rep'], Operation.WRITE, policy=policy))
        with self.assertRaises(NoAcceptedFields) as ctx:
            projector.project_write({'core': {'employee_id': 'E001'}, 'insurance': {'bpjs_tk': 'X'}})
        self.assertEqual(ctx.exception.get_codes(), 'NO_ACCEPTED_FIELDS')
        self.assertEqual(sorted(ctx.exception.rejected), ['core.employee_id', 'insurance.bpjs_tk'])

    def test_empty_change_set_is_rejected(self):
        projector = FieldProjector(AccessResolver(['admin'], Operation.WRITE))
        with self.assertRaises(NoAcceptedFields):
            projector.project_write({})

    def test_non_section_values_are_rejected(self):
        projector = FieldProjector(AccessResolver(['admin'], Operation.WRITE))
        projection = projector.project_write({'type': 'expat', 'notes': {'remark': 'ok'}})
        self.assertEqual(projection.rejected, ['type'])
        self.assertEqual(projection.accepted, {'notes': {'remark': 'ok'}})

    def test_granted_override_opens_section(self):
        rules = RuleMap()
        rules.record(ColumnRef.of('contact', 'phone'), True)
        projector = FieldProjector(AccessResolver(['employee'], Operation.WRITE, rules=rules))
        projection = projector.project_write({'contact': {'phone': '0813', 'email': 'x@example.com'}})
        self.assertEqual(projection.accepted, {'contact': {'phone': '0813'}})
        self.assertEqual(projection.rejected, ['contact.email'])
