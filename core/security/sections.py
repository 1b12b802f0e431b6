"""
Section and column identifiers for employee records.

Rule tables, record tables and the UI name the same section in several
ways ("Employee Travel", "employee_travel", "dbo.travel"). Everything in
the field security layer goes through Section / ColumnRef so the
canonical form cannot be bypassed.
"""
from dataclasses import dataclass

EMPLOYEE_PREFIXES = ('employee ', 'employee_')

# Canonical section -> record table
SECTION_TABLES = {
    'core': 'employee_core',
    'contact': 'employee_contact',
    'employment': 'employee_employment',
    'onboard': 'employee_onboard',
    'bank': 'employee_bank',
    'insurance': 'employee_insurance',
    'travel': 'employee_travel',
    'checklist': 'employee_checklist',
    'notes': 'employee_notes',
}

ALL_SECTIONS = tuple(SECTION_TABLES)


def canonical_section(raw) -> str:
    """
    Canonical section token: lower-cased, schema qualifier and
    "employee " / "employee_" prefixes stripped.
    """
    text = str(raw or '').strip().lower()
    if '.' in text:
        text = text.rsplit('.', 1)[1].strip()
    stripped = True
    while stripped:
        stripped = False
        for prefix in EMPLOYEE_PREFIXES:
            if text.startswith(prefix):
                text = text[len(prefix):].strip()
                stripped = True
    return text


def canonical_column(raw) -> str:
    return str(raw or '').strip().lower()


@dataclass(frozen=True)
class Section:
    """A canonicalized section token."""
    token: str

    def __post_init__(self):
        object.__setattr__(self, 'token', canonical_section(self.token))

    @classmethod
    def of(cls, raw) -> 'Section':
        if isinstance(raw, Section):
            return raw
        return cls(canonical_section(raw))

    @property
    def table(self):
        """Record table backing this section, or None if unknown."""
        return SECTION_TABLES.get(self.token)

    def __str__(self):
        return self.token


@dataclass(frozen=True)
class ColumnRef:
    """(section, column) pair, case-insensitive and trimmed."""
    section: Section
    column: str

    def __post_init__(self):
        object.__setattr__(self, 'section', Section.of(self.section))
        object.__setattr__(self, 'column', canonical_column(self.column))

    @classmethod
    def of(cls, section, column) -> 'ColumnRef':
        return cls(section, column)

    def moved_to(self, section) -> 'ColumnRef':
        return ColumnRef(Section.of(section), self.column)

    def __str__(self):
        return f"{self.section.token}.{self.column}"


IDENTIFIER = ColumnRef.of('core', 'employee_id')
