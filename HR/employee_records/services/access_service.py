"""
Field Access Service - Business Logic Layer

Every read and write of an employee record goes through this service so
the field security resolver is always applied.
"""
import logging
from typing import Dict, Iterable, Optional

from rest_framework import status
from rest_framework.exceptions import APIException

from core.security.policy import Operation
from core.security.projector import FieldProjector
from core.security.resolver import AccessResolver
from core.security.schema_probe import SchemaProbe
from core.security.sections import SECTION_TABLES
from HR.employee_records.services.record_service import EmployeeRecordService

logger = logging.getLogger(__name__)


class EmployeeNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Employee not found.'
    default_code = 'EMPLOYEE_NOT_FOUND'


class FieldAccessService:
    """Service layer applying field security to employee records"""

    @staticmethod
    def _load(employee_id, probe: SchemaProbe) -> Dict:
        record = EmployeeRecordService.fetch(employee_id, probe)
        if record is None:
            raise EmployeeNotFound()
        return record

    @staticmethod
    def read_record(roles: Iterable[str], employee_id, probe: Optional[SchemaProbe] = None) -> Dict:
        """Record with every column the roles cannot read removed."""
        probe = probe or SchemaProbe()
        record = FieldAccessService._load(employee_id, probe)
        resolver = AccessResolver.build(
            roles, Operation.READ, EmployeeRecordService.category_of(record), probe=probe
        )
        return FieldProjector(resolver).project_read(record, passthrough=('type',))

    @staticmethod
    def update_record(roles: Iterable[str], employee_id, changes: Dict,
                      probe: Optional[SchemaProbe] = None) -> Dict:
        """
        Apply the writable part of a change set.

        Raises:
            EmployeeNotFound: no core row for employee_id
            NoWritableSections / NoAcceptedFields: nothing may be written

        Returns:
            dict: employee_id, accepted and rejected field lists
        """
        probe = probe or SchemaProbe()
        record = FieldAccessService._load(employee_id, probe)
        resolver = AccessResolver.build(
            roles, Operation.WRITE, EmployeeRecordService.category_of(record), probe=probe
        )
        projection = FieldProjector(resolver).project_write(changes)

        written = EmployeeRecordService.apply_changes(employee_id, projection.accepted, probe)
        accepted = [f"{section}.{column}" for section, columns in written.items() for column in columns]
        skipped = [name for name in projection.accepted_fields if name not in accepted]

        return {
            'employee_id': employee_id,
            'accepted': accepted,
            'rejected': projection.rejected,
            'skipped': skipped,
        }

    @staticmethod
    def access_matrix(roles: Iterable[str], employee_id, probe: Optional[SchemaProbe] = None) -> Dict:
        """
        Read/write decision for every column of every existing section table.

        Returns:
            {section: {column: {'read': bool, 'write': bool}}}
        """
        probe = probe or SchemaProbe()
        record = FieldAccessService._load(employee_id, probe)
        category = EmployeeRecordService.category_of(record)
        reader = AccessResolver.build(roles, Operation.READ, category, probe=probe)
        writer = AccessResolver.build(roles, Operation.WRITE, category, probe=probe)

        matrix = {}
        for section, table in SECTION_TABLES.items():
            columns = sorted(probe.columns_of(table))
            if not columns:
                continue
            matrix[section] = {
                column: {
                    'read': reader.can_access(section, column),
                    'write': writer.can_access(section, column),
                }
                for column in columns
            }
        return matrix
