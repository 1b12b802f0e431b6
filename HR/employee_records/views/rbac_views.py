from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.security.decorators import request_roles
from HR.employee_records.serializers import PermissionSerializer
from HR.employee_records.services.rbac_service import RbacCatalogService


@api_view(['GET'])
def rbac_roles(request):
    """
    Known role names.

    GET /hr/rbac/roles/
    - Role catalog, else roles of stored permissions, else login roles
    """
    return Response(RbacCatalogService.list_roles(), status=status.HTTP_200_OK)


@api_view(['GET', 'POST'])
def rbac_permissions(request):
    """
    List or replace stored module permissions.

    GET /hr/rbac/permissions/

    POST /hr/rbac/permissions/
    - Body: {"role", "module", "action", "allowed"}
    - 403 USER_MANAGEMENT_REQUIRED unless the caller may manage that role
    """
    if request.method == 'GET':
        return Response(RbacCatalogService.list_permissions(), status=status.HTTP_200_OK)

    serializer = PermissionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    permission = RbacCatalogService.upsert_permission(request_roles(request), serializer.to_dto())
    return Response(permission, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def rbac_me(request):
    """GET /hr/rbac/me/ - the caller's roles and module permissions"""
    return Response(RbacCatalogService.caller_permissions(request_roles(request)), status=status.HTTP_200_OK)
