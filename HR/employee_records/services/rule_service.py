"""
Column Rule Service - administration of stored column overrides
"""
import logging
from typing import Dict, List

from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import APIException

from core.security.override_store import NormalizedRuleSource, OverrideStore, TextualRuleSource
from core.security.schema_probe import SchemaProbe
from core.security.sections import ColumnRef
from HR.employee_records.dtos import ColumnRuleDTO

logger = logging.getLogger(__name__)


class RuleTableUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Column rule table is not provisioned. Run "manage.py init_rbac_schemas".'
    default_code = 'RULE_TABLE_UNAVAILABLE'


class ColumnRuleService:
    """Lists and upserts role/column override rules"""

    @staticmethod
    def list_rules(probe: SchemaProbe = None) -> List[Dict]:
        """Stored rules from both layouts, sorted by role, section, column."""
        rows = OverrideStore.list_rules(probe or SchemaProbe())
        rules = [
            {
                'role': row.role,
                'section': row.ref.section.token,
                'column': row.ref.column,
                'can_read': bool(row.read),
                'can_write': bool(row.write),
            }
            for row in rows
        ]
        return sorted(rules, key=lambda r: (r['role'], r['section'], r['column']))

    @staticmethod
    def upsert_rule(dto: ColumnRuleDTO, probe: SchemaProbe = None) -> Dict:
        """
        Replace the stored rule for (role, section, column).

        The normalized layout is written when present, the textual layout
        otherwise. Existing rows of every present layout are matched on
        canonical section/column and on the normalized role, so legacy
        spellings do not linger.
        """
        probe = probe or SchemaProbe()
        sources = [
            source for source in (NormalizedRuleSource(probe), TextualRuleSource(probe))
            if source.is_present()
        ]
        if not sources:
            raise RuleTableUnavailable()

        ref = ColumnRef.of(dto.section, dto.column)
        with transaction.atomic(using=probe.connection.alias):
            replaced = sum(source.discard(dto.role, ref) for source in sources)
            sources[0].insert(dto.role, ref, dto.can_read, dto.can_write)

        logger.info(
            f"Column rule {dto.role} {ref} ({sources[0].layout}): read={dto.can_read} "
            f"write={dto.can_write} (replaced {replaced} row(s))"
        )
        return {
            'role': dto.role,
            'section': ref.section.token,
            'column': ref.column,
            'can_read': dto.can_read,
            'can_write': dto.can_write,
        }
