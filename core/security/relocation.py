"""
Legacy relocation rules.

A column that moved between sections keeps answering to the rules stored
at its previous location until someone writes a rule at the current one.
Each move is registered here as one LegacyRelocation instance.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .roles import Role, role_token
from .sections import ColumnRef, Section, canonical_column


@dataclass(frozen=True)
class LegacyRelocation:
    """
    Column `column` lives in either section of `sections`; for callers
    holding `role`, a rule stored at one location stands in for a missing
    rule at the other.
    """
    column: str
    sections: Tuple[Section, Section]
    role: str

    def __post_init__(self):
        object.__setattr__(self, 'column', canonical_column(self.column))
        object.__setattr__(self, 'sections', tuple(Section.of(s) for s in self.sections))
        object.__setattr__(self, 'role', role_token(self.role))

    def applies_to(self, ref: ColumnRef, roles: Iterable[str]) -> bool:
        if ref.column != self.column or ref.section not in self.sections:
            return False
        return self.role in {role_token(r) for r in roles}

    def counterpart(self, ref: ColumnRef, roles: Iterable[str], rules) -> Optional[ColumnRef]:
        """
        Location whose rule decides `ref`, or None when the rule does not
        engage (wrong column, role missing, a rule exists at `ref`, or no
        rule at the other location).
        """
        if not self.applies_to(ref, roles):
            return None
        if rules.has_rule(ref):
            return None
        first, second = self.sections
        other = ref.moved_to(second if ref.section == first else first)
        if not rules.has_rule(other):
            return None
        return other


EMPLOYMENT_STATUS_RELOCATION = LegacyRelocation(
    column='employment_status',
    sections=(Section.of('employment'), Section.of('onboard')),
    role=Role.HR_GENERAL,
)

RELOCATIONS = (EMPLOYMENT_STATUS_RELOCATION,)
