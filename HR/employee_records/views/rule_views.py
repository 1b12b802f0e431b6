from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.security.decorators import require_roles
from HR.employee_records.serializers import ColumnRuleSerializer
from HR.employee_records.services.rule_service import ColumnRuleService


@api_view(['GET', 'POST'])
@require_roles('admin', 'superadmin', methods=['POST'])
def column_rules(request):
    """
    List or upsert stored column overrides.

    GET /hr/rbac/columns/
    - Rules from both table layouts

    POST /hr/rbac/columns/
    - Admin / superadmin only
    - Body: {"role", "section", "column", "can_read", "can_write"}
    """
    if request.method == 'GET':
        return Response(ColumnRuleService.list_rules(), status=status.HTTP_200_OK)

    serializer = ColumnRuleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    rule = ColumnRuleService.upsert_rule(serializer.to_dto())
    return Response(rule, status=status.HTTP_201_CREATED)
