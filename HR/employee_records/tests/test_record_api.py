"""
API Tests for employee record endpoints.
"""
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.security.test_utils import (
    bearer_token,
    create_employee_tables,
    create_textual_rules,
    create_type_denials,
    insert_rows,
)


class EmployeeRecordAPITest(TestCase):
    """Test GET/PATCH /hr/employees/<id>/ and the access matrix"""

    def setUp(self):
        self.client = APIClient()
        create_employee_tables({
            'core': ['name', 'nationality'],
            'contact': ['phone', 'email'],
            'employment': ['job_title', 'employment_status', 'blacklist_mti'],
            'onboard': ['employment_status'],
            'bank': ['account_no'],
            'insurance': ['bpjs_tk'],
        })
        insert_rows('employee_core', [{'employee_id': 'E001', 'name': 'John', 'nationality': 'Australia'}])
        insert_rows('employee_contact', [{'employee_id': 'E001', 'phone': '0812', 'email': 'john@example.com'}])
        insert_rows('employee_employment', [{
            'employee_id': 'E001', 'job_title': 'Engineer',
            'employment_status': 'Permanent', 'blacklist_mti': 'no',
        }])
        insert_rows('employee_bank', [{'employee_id': 'E001', 'account_no': '123'}])
        create_textual_rules([
            {'role': 'hr_general', 'section': 'onboard', 'column': 'employment_status',
             'can_read': False, 'can_write': False},
        ])
        create_type_denials([
            {'employee_type': 'expat', 'section': 'employment', 'column': 'blacklist_mti', 'accessible': False},
        ])
        self.url = reverse('hr:employee_records:employee_record', args=['E001'])

    def authenticate(self, *roles):
        self.client.credentials(HTTP_AUTHORIZATION=bearer_token(roles))

    def test_requires_authentication(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['status'], 'error')

    def test_finance_read_is_redacted(self):
        self.authenticate('finance')
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        body = response.json()
        self.assertEqual(body['status'], 'success')
        data = body['data']
        self.assertEqual(data['bank']['account_no'], '123')
        self.assertEqual(data['core']['employee_id'], 'E001')
        self.assertNotIn('contact', data)
        self.assertNotIn('employment', data)
        self.assertNotIn('insurance', data)
        self.assertEqual(data['type'], 'expat')

    def test_hr_general_legacy_rule_and_denylist(self):
        self.authenticate('HR General')
        data = self.client.get(self.url).json()['data']
        self.assertEqual(data['employment'], {'employee_id': 'E001', 'job_title': 'Engineer'})
        self.assertEqual(data['contact']['phone'], '0812')

    def test_unknown_employee(self):
        self.authenticate('admin')
        response = self.client.get(reverse('hr:employee_records:employee_record', args=['E404']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['code'], 'EMPLOYEE_NOT_FOUND')

    def test_patch_applies_accepted_fields(self):
        self.authenticate('finance')
        response = self.client.patch(self.url, {
            'changes': {'bank': {'account_no': '999'}, 'contact': {'phone': '0000'}},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        result = response.json()['data']
        self.assertEqual(result['accepted'], ['bank.account_no'])
        self.assertEqual(result['rejected'], ['contact.phone'])

        self.authenticate('admin')
        data = self.client.get(self.url).json()['data']
        self.assertEqual(data['bank']['account_no'], '999')
        self.assertEqual(data['contact']['phone'], '0812')

    def test_patch_without_writable_sections(self):
        self.authenticate('department_rep')
        response = self.client.patch(self.url, {
            'changes': {'core': {'employee_id': 'E002'}, 'insurance': {'bpjs_tk': 'TK'}},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        body = response.json()
        self.assertEqual(body['code'], 'NO_SECTION_ACCESS')
        self.assertIsNone(body['data'])

    def test_patch_without_accepted_fields(self):
        self.authenticate('finance')
        response = self.client.patch(self.url, {
            'changes': {'core': {'employee_id': 'E002'}, 'contact': {'phone': '0000'}},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        body = response.json()
        self.assertEqual(body['status'], 'error')
        self.assertEqual(body['code'], 'NO_ACCEPTED_FIELDS')
        self.assertEqual(sorted(body['data']['rejected']), ['contact.phone', 'core.employee_id'])

    def test_patch_validates_body(self):
        self.authenticate('admin')
        response = self.client.patch(self.url, {'changes': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_access_matrix(self):
        self.authenticate('hr_general')
        response = self.client.get(reverse('hr:employee_records:employee_access', args=['E001']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        matrix = response.json()['data']
        self.assertEqual(matrix['core']['employee_id'], {'read': True, 'write': False})
        self.assertEqual(matrix['contact']['phone'], {'read': True, 'write': True})
        self.assertEqual(matrix['employment']['employment_status'], {'read': False, 'write': False})
        self.assertEqual(matrix['employment']['blacklist_mti'], {'read': False, 'write': False})
        self.assertEqual(matrix['bank']['account_no'], {'read': False, 'write': False})
        self.assertNotIn('travel', matrix)
