"""
RBAC Catalog Service - role catalog and stored module permissions
"""
import logging
from typing import Dict, Iterable, List

from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied

from core.security.catalogs import RoleCatalog, clean_text
from core.security.conf import rule_table
from core.security.permission_store import PermissionStore
from core.security.policy import DEFAULT_MODULE_POLICY, ModulePolicy
from core.security.roles import normalize_role
from core.security.schema_probe import SchemaProbe
from HR.employee_records.dtos import PermissionDTO

logger = logging.getLogger(__name__)


class PermissionTableUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Role permission table is not provisioned. Run "manage.py init_rbac_schemas".'
    default_code = 'PERMISSION_TABLE_UNAVAILABLE'


class UserManagementDenied(PermissionDenied):
    default_detail = 'Your roles do not allow managing this role.'
    default_code = 'USER_MANAGEMENT_REQUIRED'


class RbacCatalogService:
    """Role names, stored permissions and the caller's module permissions"""

    @staticmethod
    def list_roles(probe: SchemaProbe = None) -> List[str]:
        """
        Known role names.

        Sources, first non-empty wins:
        1. Names in the role catalog
        2. Roles referenced by stored permissions
        3. Normalized roles of the login table's [role] column
        """
        probe = probe or SchemaProbe()

        try:
            with transaction.atomic(using=probe.connection.alias):
                roles = RoleCatalog(probe).names()
        except Exception as e:
            logger.warning(f"Role catalog unavailable: {e}")
            roles = []
        if roles:
            return roles

        roles = PermissionStore(probe).role_names()
        if roles:
            return roles

        return RbacCatalogService._login_roles(probe)

    @staticmethod
    def _login_roles(probe: SchemaProbe) -> List[str]:
        table = rule_table('login')
        role_col = probe.pick_column(table, 'role')
        if not role_col:
            return []
        q = probe.quote
        try:
            with transaction.atomic(using=probe.connection.alias):
                with probe.connection.cursor() as cursor:
                    cursor.execute(
                        f"SELECT DISTINCT {q(role_col)} FROM {probe.qualified(table)} "
                        f"WHERE {q(role_col)} IS NOT NULL"
                    )
                    labels = [row[0] for row in cursor.fetchall()]
        except Exception as e:
            logger.warning(f"Login roles on {table} unavailable: {e}")
            return []
        return sorted({normalize_role(label) for label in labels if clean_text(label)})

    @staticmethod
    def list_permissions(probe: SchemaProbe = None) -> List[Dict]:
        return [row.as_dict() for row in PermissionStore(probe or SchemaProbe()).list_permissions()]

    @staticmethod
    def upsert_permission(actor_roles: Iterable[str], dto: PermissionDTO, probe: SchemaProbe = None,
                          policy: ModulePolicy = DEFAULT_MODULE_POLICY) -> Dict:
        """
        Replace the stored permission of dto.role for (module, action).

        Raises:
            UserManagementDenied: the actor may not manage dto.role
            PermissionTableUnavailable: role_permissions is missing or incomplete
        """
        if not policy.can_manage_users(actor_roles, target_role=dto.role):
            raise UserManagementDenied()

        probe = probe or SchemaProbe()
        store = PermissionStore(probe)
        if not store.is_present():
            raise PermissionTableUnavailable()

        with transaction.atomic(using=probe.connection.alias):
            store.upsert(dto.role, dto.module, dto.action, dto.allowed)

        return {'role': dto.role, 'module': dto.module, 'action': dto.action, 'allowed': dto.allowed}

    @staticmethod
    def caller_permissions(roles: Iterable[str], policy: ModulePolicy = DEFAULT_MODULE_POLICY) -> Dict:
        roles = sorted(roles)
        return {'roles': roles, 'permissions': policy.permissions_for(roles)}
