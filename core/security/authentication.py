"""
Token user carrying normalized roles.

Tokens are issued by the external login service; this project only
verifies them (JWTStatelessUserAuthentication) and reads the role claim.
Installed through SIMPLE_JWT['TOKEN_USER_CLASS'].
"""
from django.conf import settings
from django.utils.functional import cached_property
from rest_framework_simplejwt.models import TokenUser

from .roles import normalize_roles


def roles_claim() -> str:
    return getattr(settings, 'HRIS_ROLES_CLAIM', 'roles')


class RoleTokenUser(TokenUser):
    """TokenUser whose `roles` are canonical role tokens from the token claim."""

    @cached_property
    def roles(self):
        return normalize_roles(self.token.get(roles_claim(), []))

    def has_any_role(self, *roles) -> bool:
        return bool(self.roles & normalize_roles(roles))
