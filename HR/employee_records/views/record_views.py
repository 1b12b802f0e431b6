from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.security.decorators import request_roles
from HR.employee_records.serializers import RecordChangesSerializer
from HR.employee_records.services.access_service import FieldAccessService


@api_view(['GET', 'PATCH'])
def employee_record(request, employee_id):
    """
    Read or update one employee record.

    GET /hr/employees/<employee_id>/
    - Sections and columns the caller cannot read are left out

    PATCH /hr/employees/<employee_id>/
    - Body: {"changes": {"contact": {"phone": "..."}}}
    - 403 NO_SECTION_ACCESS when the caller can write nothing at all
    - 403 NO_ACCEPTED_FIELDS when every requested field is filtered out
    """
    roles = request_roles(request)

    if request.method == 'GET':
        record = FieldAccessService.read_record(roles, employee_id)
        return Response(record, status=status.HTTP_200_OK)

    serializer = RecordChangesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = FieldAccessService.update_record(roles, employee_id, serializer.validated_data['changes'])
    return Response({
        'status': 'success',
        'message': f"Updated {len(result['accepted'])} field(s)",
        'data': result,
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
def employee_access(request, employee_id):
    """
    Per-column read/write matrix of the caller for one employee record.

    GET /hr/employees/<employee_id>/access/
    """
    matrix = FieldAccessService.access_matrix(request_roles(request), employee_id)
    return Response(matrix, status=status.HTTP_200_OK)
