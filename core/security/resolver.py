"""
Access Resolver - one decision function per request and operation
=================================================================

Evaluation order for can_access(section, column):
1. Identifier exception: core.employee_id is always readable, never writable
2. Legacy relocation: a rule at a column's previous location stands in
   for a missing rule at its current one (see relocation.py)
3. Override: a stored rule for the exact column decides, grant or deny
4. Static default: membership of the section in the roles' default set
5. Category veto: a denylisted column is denied, whatever 2-4 said

Usage:
    resolver = AccessResolver.build(['hr_general'], Operation.READ, RecordCategory.EXPAT)
    resolver.can_access('employment', 'employment_status')
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from .override_store import OverrideStore, RuleMap
from .policy import DEFAULT_POLICY, Operation, SectionPolicy
from .relocation import RELOCATIONS
from .roles import normalize_roles
from .schema_probe import SchemaProbe
from .sections import IDENTIFIER, ColumnRef, Section
from .type_denylist import TypeDenylist

logger = logging.getLogger(__name__)

SOURCE_IDENTIFIER = 'identifier'
SOURCE_RELOCATION = 'relocation'
SOURCE_OVERRIDE = 'override'
SOURCE_DEFAULT = 'default'
SOURCE_DENYLIST = 'denylist'


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    source: str

    def __bool__(self):
        return self.allowed


class AccessResolver:
    """
    Field-level access decisions for one role set and one operation.

    Args:
        roles: role labels (normalized on the way in)
        op: Operation.READ or Operation.WRITE
        policy: SectionPolicy with the static defaults
        rules: RuleMap of stored overrides for this op
        denied: ColumnRefs vetoed for the record's category
        relocations: LegacyRelocation rules to apply
    """

    def __init__(self, roles: Iterable[str], op, policy: SectionPolicy = DEFAULT_POLICY,
                 rules: Optional[RuleMap] = None, denied: Iterable[ColumnRef] = (),
                 relocations=RELOCATIONS):
        self.roles = normalize_roles(roles)
        self.op = Operation(op)
        self.policy = policy
        self.rules = rules if rules is not None else RuleMap()
        self.denied = frozenset(denied)
        self.relocations = tuple(relocations)
        self._default_sections = policy.sections_for(self.roles, self.op)

    @classmethod
    def build(cls, roles, op, category, probe: Optional[SchemaProbe] = None,
              policy: SectionPolicy = DEFAULT_POLICY) -> 'AccessResolver':
        """
        Load overrides and the category denylist for one request.

        Args:
            category: RecordCategory of the subject record, or None if unknown
        """
        probe = probe or SchemaProbe()
        roles = normalize_roles(roles)
        rules = OverrideStore(roles, op, probe=probe).load()
        denied = TypeDenylist(category, probe=probe).load()
        return cls(roles, op, policy=policy, rules=rules, denied=denied)

    def decide(self, section, column) -> AccessDecision:
        ref = ColumnRef.of(section, column)

        if ref == IDENTIFIER:
            # Exempt from the category veto too; records must stay addressable
            return AccessDecision(self.op == Operation.READ, SOURCE_IDENTIFIER)

        decision = self._relocated(ref)
        if decision is None:
            if self.rules.has_rule(ref):
                decision = AccessDecision(self.rules.is_granted(ref), SOURCE_OVERRIDE)
            else:
                decision = AccessDecision(ref.section in self._default_sections, SOURCE_DEFAULT)

        if decision.allowed and ref in self.denied:
            return AccessDecision(False, SOURCE_DENYLIST)
        return decision

    def _relocated(self, ref: ColumnRef) -> Optional[AccessDecision]:
        for relocation in self.relocations:
            other = relocation.counterpart(ref, self.roles, self.rules)
            if other is not None:
                logger.debug(f"{ref} decided by legacy rule at {other}")
                return AccessDecision(self.rules.is_granted(other), SOURCE_RELOCATION)
        return None

    def can_access(self, section, column) -> bool:
        return self.decide(section, column).allowed

    def sections_with_access(self) -> FrozenSet[Section]:
        """Sections where at least one column can be granted: defaults plus granted overrides."""
        return frozenset(self._default_sections | self.rules.granted_sections())
