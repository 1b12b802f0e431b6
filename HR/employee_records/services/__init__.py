"""
Employee Records Services

Services:
- EmployeeRecordService: assemble and persist records across section tables
- FieldAccessService: redacted reads, filtered writes, access matrix
- ColumnRuleService: list and upsert stored column overrides
- RbacCatalogService: role names and stored module permissions
- EmployeeReportService: paged reports redacted per row
"""

from .record_service import EmployeeRecordService
from .access_service import FieldAccessService, EmployeeNotFound
from .rule_service import ColumnRuleService, RuleTableUnavailable
from .rbac_service import RbacCatalogService, PermissionTableUnavailable, UserManagementDenied
from .report_service import EmployeeReportService, ReportAccessDenied

__all__ = [
    'EmployeeRecordService',
    'FieldAccessService',
    'EmployeeNotFound',
    'ColumnRuleService',
    'RuleTableUnavailable',
    'RbacCatalogService',
    'PermissionTableUnavailable',
    'UserManagementDenied',
    'EmployeeReportService',
    'ReportAccessDenied',
]
