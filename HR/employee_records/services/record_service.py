"""
Employee Record Service - Data Access Layer

Employee records are spread over one table per section, all keyed by
employee_id. Tables and columns differ between environments, so every
statement is built from what the SchemaProbe reports.
"""
import logging
from typing import Dict, List, Optional

from django.db import transaction

from core.security.conf import category_field
from core.security.override_store import dictfetchall
from core.security.schema_probe import SchemaProbe
from core.security.sections import IDENTIFIER, SECTION_TABLES, Section
from core.security.type_denylist import categorize

logger = logging.getLogger(__name__)

KEY_COLUMN = IDENTIFIER.column


class EmployeeRecordService:
    """Reads and writes complete employee records"""

    @staticmethod
    def fetch(employee_id, probe: Optional[SchemaProbe] = None) -> Optional[Dict]:
        """
        Assemble the full, unfiltered record of one employee.

        Returns:
            {section: {column: value}, ..., 'type': category or None},
            or None when no core row exists
        """
        probe = probe or SchemaProbe()
        q = probe.quote
        record = {}

        for token, table in SECTION_TABLES.items():
            if KEY_COLUMN not in probe.columns_of(table):
                continue
            with probe.connection.cursor() as cursor:
                cursor.execute(
                    f"SELECT * FROM {probe.qualified(table)} WHERE {q(KEY_COLUMN)} = %s",
                    [employee_id],
                )
                rows = dictfetchall(cursor)
            record[token] = rows[0] if rows else {}

        if not record.get('core'):
            return None

        category = EmployeeRecordService.category_of(record)
        record['type'] = category.value if category else None
        return record

    @staticmethod
    def fetch_core_page(limit: int, offset: int = 0, probe: Optional[SchemaProbe] = None) -> List[Dict]:
        """
        Unfiltered core rows ordered by employee_id, one page at a time.
        """
        probe = probe or SchemaProbe()
        q = probe.quote
        table = SECTION_TABLES['core']
        if KEY_COLUMN not in probe.columns_of(table):
            return []

        if probe.connection.vendor == 'microsoft':
            page = "OFFSET %s ROWS FETCH NEXT %s ROWS ONLY"
            params = [offset, limit]
        else:
            page = "LIMIT %s OFFSET %s"
            params = [limit, offset]
        with probe.connection.cursor() as cursor:
            cursor.execute(
                f"SELECT * FROM {probe.qualified(table)} ORDER BY {q(KEY_COLUMN)} {page}",
                params,
            )
            return dictfetchall(cursor)

    @staticmethod
    def category_of(record: Dict):
        """RecordCategory of an assembled record, None when unrecognized."""
        section, column = category_field()
        return categorize((record.get(Section.of(section).token) or {}).get(column))

    @staticmethod
    def apply_changes(employee_id, accepted: Dict[str, Dict], probe: Optional[SchemaProbe] = None) -> Dict[str, Dict]:
        """
        Upsert approved changes, one statement per section, all or nothing.

        Columns the section table does not expose are skipped.

        Returns:
            {section: {column: value}} actually written
        """
        probe = probe or SchemaProbe()
        q = probe.quote
        written = {}

        with transaction.atomic(using=probe.connection.alias):
            for section_token, columns in accepted.items():
                section = Section.of(section_token)
                table = section.table
                if table is None:
                    continue
                existing = probe.columns_of(table)
                values = {
                    column: value
                    for column, value in columns.items()
                    if column in existing and column != KEY_COLUMN
                }
                if not values:
                    continue

                target = probe.qualified(table)
                with probe.connection.cursor() as cursor:
                    cursor.execute(
                        f"SELECT 1 FROM {target} WHERE {q(KEY_COLUMN)} = %s",
                        [employee_id],
                    )
                    if cursor.fetchone():
                        assignments = ', '.join(f"{q(c)} = %s" for c in values)
                        cursor.execute(
                            f"UPDATE {target} SET {assignments} WHERE {q(KEY_COLUMN)} = %s",
                            list(values.values()) + [employee_id],
                        )
                    else:
                        names = [KEY_COLUMN] + list(values)
                        cursor.execute(
                            f"INSERT INTO {target} ({', '.join(q(c) for c in names)}) "
                            f"VALUES ({', '.join(['%s'] * len(names))})",
                            [employee_id] + list(values.values()),
                        )
                written[section.token] = values

        logger.info(f"Employee {employee_id}: updated sections {sorted(written)}")
        return written
