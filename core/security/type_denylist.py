"""
Record-category denylist.

`type_column_access(employee_type, section, column, accessible)` marks
columns that are never accessible for records of one category, whatever
the caller's roles are. Rows only veto: accessible=true has no effect,
and a missing row means accessible.
"""
import logging
from enum import Enum
from typing import Dict, FrozenSet, Optional

from django.db import transaction

from .conf import fallback_category, rule_table
from .override_store import dictfetchall
from .schema_probe import SchemaProbe
from .sections import ColumnRef

logger = logging.getLogger(__name__)


class RecordCategory(str, Enum):
    INDONESIA = 'indonesia'
    EXPAT = 'expat'


CATEGORY_ALIASES = {
    RecordCategory.INDONESIA: ('indonesia', 'indonesian', 'local', 'domestic', 'wni'),
    RecordCategory.EXPAT: ('expat', 'expatriate', 'foreign', 'wna'),
}

CATEGORIES_BY_SPELLING = {
    spelling: category
    for category, spellings in CATEGORY_ALIASES.items()
    for spelling in spellings
}


def category_from_label(label) -> Optional[RecordCategory]:
    """Strict lookup of a stored category spelling."""
    if isinstance(label, RecordCategory):
        return label
    return CATEGORIES_BY_SPELLING.get(str(label or '').strip().lower())


def categorize(value) -> Optional[RecordCategory]:
    """
    Category of a record from its classification field (nationality).

    Returns None for an empty value so the caller applies the broadest
    denylist instead of guessing.
    """
    text = str(value or '').strip().lower()
    if not text:
        return None
    known = category_from_label(text)
    if known is not None:
        return known
    if text.startswith('indo'):
        return RecordCategory.INDONESIA
    return RecordCategory.EXPAT


class TypeDenylist:
    """
    Denied (section, column) pairs for one record category.

    Stored category labels other than an expat spelling are filed under
    indonesia. Every category is read with one query; load() then picks
    the requested one.

    Args:
        category: RecordCategory, a category spelling, or None when the
            record's classification is unknown
        probe: SchemaProbe for this request
    """

    def __init__(self, category, probe: Optional[SchemaProbe] = None, table: Optional[str] = None):
        self.category = category_from_label(category) if category is not None else None
        self.probe = probe or SchemaProbe()
        self.table = table or rule_table('type_column_access')

    def load(self) -> FrozenSet[ColumnRef]:
        return self.pick(self.load_all(), self.category)

    @staticmethod
    def pick(by_category: Dict[RecordCategory, FrozenSet[ColumnRef]], category) -> FrozenSet[ColumnRef]:
        """
        Denials of `category`; for None, the larger denylist, ties going
        to HRIS_FALLBACK_CATEGORY.
        """
        if category is not None:
            return by_category.get(category, frozenset())

        fallback = category_from_label(fallback_category()) or RecordCategory.EXPAT
        chosen = fallback
        for candidate, denied in by_category.items():
            if len(denied) > len(by_category.get(chosen, frozenset())):
                chosen = candidate
        logger.info(f"Unrecognized record category, applying {chosen.value} denylist")
        return by_category.get(chosen, frozenset())

    def load_all(self) -> Dict[RecordCategory, FrozenSet[ColumnRef]]:
        """Every category's denials from one query."""
        if not self.probe.has_columns(self.table, 'employee_type', 'section', 'column', 'accessible'):
            return {}

        q = self.probe.quote
        sql = (
            f"SELECT {q('employee_type')}, {q('section')}, {q('column')}, {q('accessible')} "
            f"FROM {self.probe.qualified(self.table)}"
        )
        try:
            with transaction.atomic(using=self.probe.connection.alias):
                with self.probe.connection.cursor() as cursor:
                    cursor.execute(sql)
                    records = dictfetchall(cursor)
        except Exception as e:
            logger.warning(f"Type denylist on {self.table} unavailable: {e}")
            return {}

        denied = {category: set() for category in RecordCategory}
        for record in records:
            if record.get('accessible'):
                continue
            label = str(record.get('employee_type') or '').strip()
            section = str(record.get('section') or '').strip()
            column = str(record.get('column') or '').strip()
            if not label or not section or not column:
                logger.debug(f"Skipping incomplete type rule {label!r} {section!r}.{column!r}")
                continue
            category = category_from_label(label)
            if category is None:
                logger.debug(f"Type rule label {label!r} filed under {RecordCategory.INDONESIA.value}")
                category = RecordCategory.INDONESIA
            denied[category].add(ColumnRef.of(section, column))
        return {category: frozenset(refs) for category, refs in denied.items()}
