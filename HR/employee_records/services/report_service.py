"""
Employee Report Service - paged reports with field security applied per row
"""
import logging
from typing import Dict, Iterable, Optional

from rest_framework import status
from rest_framework.exceptions import APIException

from core.security.override_store import OverrideStore
from core.security.policy import DEFAULT_MODULE_POLICY, ModulePolicy, Operation
from core.security.projector import FieldProjector
from core.security.resolver import AccessResolver
from core.security.schema_probe import SchemaProbe
from core.security.type_denylist import TypeDenylist
from HR.employee_records.services.record_service import EmployeeRecordService

logger = logging.getLogger(__name__)

EMPLOYEES_CORE_REPORT = 'employees-core'
DEFAULT_LIMIT = 200
MAX_LIMIT = 1000


class ReportAccessDenied(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Your roles do not grant access to reports.'
    default_code = 'FORBIDDEN_REPORT_ACCESS'


class EmployeeReportService:
    """Runs the configured employee reports"""

    @staticmethod
    def page_bounds(limit=None, offset=None):
        """Clamp paging parameters: limit 1..MAX_LIMIT (default DEFAULT_LIMIT), offset >= 0."""
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        if limit <= 0:
            limit = DEFAULT_LIMIT
        try:
            offset = int(offset)
        except (TypeError, ValueError):
            offset = 0
        return min(limit, MAX_LIMIT), max(offset, 0)

    @staticmethod
    def run(roles: Iterable[str], report_id: str, limit=None, offset=None,
            probe: Optional[SchemaProbe] = None, policy: ModulePolicy = DEFAULT_MODULE_POLICY) -> Dict:
        """
        Run one report for the caller.

        Each row is redacted with the caller's read access for that row's
        record category, so the category denylist applies row by row.

        Raises:
            ReportAccessDenied: the roles may not access reports

        Returns:
            dict: id, rows, paging, exportable (and a note for unknown ids)
        """
        roles = list(roles)
        if not policy.can_access_report(roles):
            raise ReportAccessDenied()

        limit, offset = EmployeeReportService.page_bounds(limit, offset)
        result = {
            'id': report_id,
            'rows': [],
            'paging': {'limit': limit, 'offset': offset, 'count': 0},
            'exportable': policy.can_export_report(roles),
        }
        if report_id != EMPLOYEES_CORE_REPORT:
            result['note'] = 'No report configured for this id'
            return result

        probe = probe or SchemaProbe()
        rows = EmployeeRecordService.fetch_core_page(limit, offset, probe)

        # One rule load and one denylist load for the whole page
        rules = OverrideStore(roles, Operation.READ, probe=probe).load()
        denials = TypeDenylist(None, probe=probe).load_all()
        projectors = {}

        for row in rows:
            category = EmployeeRecordService.category_of({'core': row})
            if category not in projectors:
                resolver = AccessResolver(
                    roles, Operation.READ, rules=rules, denied=TypeDenylist.pick(denials, category)
                )
                projectors[category] = FieldProjector(resolver)
            visible = projectors[category].project_read({'core': row})
            result['rows'].append(visible.get('core', {}))

        result['paging']['count'] = len(result['rows'])
        logger.debug(f"Report {report_id}: {len(result['rows'])} row(s) at offset {offset}")
        return result
