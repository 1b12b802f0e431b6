"""
Core Security Module - Field Security

Decides, per section and per column of an employee record, whether a
role set may read or write a value. Four rule sources are combined:
- Static section defaults per role (policy.py)
- Stored per-column overrides, textual and normalized layouts (override_store.py)
- Legacy relocation of moved columns (relocation.py)
- Record-category denylist (type_denylist.py)

Module/action permissions for clients (ModulePolicy, permission_store.py)
sit beside the field rules and never feed into them.

Typical use:
    resolver = AccessResolver.build(roles, Operation.READ, categorize(nationality))
    FieldProjector(resolver).project_read(record)
"""

from .catalogs import ColumnCatalog, RoleCatalog
from .exceptions import CatalogEntryMissing, NoAcceptedFields, NoWritableSections, WriteRejected
from .override_store import OverrideStore, RuleMap
from .permission_store import PermissionRow, PermissionStore
from .policy import DEFAULT_MODULE_POLICY, DEFAULT_POLICY, Actions, ModulePolicy, Modules, Operation, SectionPolicy
from .projector import FieldProjector, WriteProjection
from .relocation import EMPLOYMENT_STATUS_RELOCATION, LegacyRelocation
from .resolver import AccessDecision, AccessResolver
from .roles import Role, holds_role, normalize_role, normalize_roles
from .schema_probe import SchemaProbe
from .sections import IDENTIFIER, ColumnRef, Section, canonical_section
from .type_denylist import RecordCategory, TypeDenylist, categorize

__all__ = [
    # Decisions
    'AccessResolver',
    'AccessDecision',
    'FieldProjector',
    'WriteProjection',
    'Operation',

    # Rule sources
    'SectionPolicy',
    'DEFAULT_POLICY',
    'OverrideStore',
    'RuleMap',
    'TypeDenylist',
    'RecordCategory',
    'categorize',
    'LegacyRelocation',
    'EMPLOYMENT_STATUS_RELOCATION',
    'SchemaProbe',

    # Module permissions and catalogs
    'ModulePolicy',
    'DEFAULT_MODULE_POLICY',
    'Modules',
    'Actions',
    'PermissionStore',
    'PermissionRow',
    'RoleCatalog',
    'ColumnCatalog',

    # Identifiers
    'Role',
    'normalize_role',
    'normalize_roles',
    'holds_role',
    'Section',
    'ColumnRef',
    'IDENTIFIER',
    'canonical_section',

    # Rejections
    'WriteRejected',
    'NoWritableSections',
    'NoAcceptedFields',
    'CatalogEntryMissing',
]
