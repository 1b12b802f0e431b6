from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.security.decorators import request_roles
from HR.employee_records.services.report_service import EmployeeReportService


@api_view(['GET'])
def employee_report(request, report_id):
    """
    Run one report.

    GET /hr/reports/<report_id>/?limit=200&offset=0
    - 403 FORBIDDEN_REPORT_ACCESS when the caller's roles have no report access
    - Every row is redacted for its own record category
    """
    report = EmployeeReportService.run(
        request_roles(request),
        report_id,
        limit=request.query_params.get('limit'),
        offset=request.query_params.get('offset'),
    )
    return Response(report, status=status.HTTP_200_OK)
