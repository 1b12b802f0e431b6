"""
Field projection of employee records.

Records and change sets are nested mappings: {section: {column: value}}.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .exceptions import NoAcceptedFields, NoWritableSections
from .policy import Operation
from .resolver import AccessResolver
from .sections import ColumnRef, Section

logger = logging.getLogger(__name__)


@dataclass
class WriteProjection:
    accepted: Dict[str, Dict] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)

    @property
    def accepted_fields(self) -> List[str]:
        return [f"{section}.{column}" for section, columns in self.accepted.items() for column in columns]


class FieldProjector:
    """Applies an AccessResolver to read responses and write requests."""

    def __init__(self, resolver: AccessResolver):
        self.resolver = resolver

    def _expect(self, op: Operation):
        if self.resolver.op != op:
            raise ValueError(f"{op.value} projection needs a {op.value} resolver, got {self.resolver.op.value}")

    def project_read(self, record: Mapping, passthrough: Iterable[str] = ()) -> Dict:
        """
        Readable part of a fully assembled record.

        Sections left with no columns are omitted. Top-level values that
        are not sections are dropped unless named in `passthrough`.
        """
        self._expect(Operation.READ)
        passthrough = set(passthrough)
        output = {}
        for key, value in (record or {}).items():
            if isinstance(value, Mapping):
                section = Section.of(key)
                visible = {
                    column: column_value
                    for column, column_value in value.items()
                    if self.resolver.can_access(section, column)
                }
                if visible:
                    output.setdefault(section.token, {}).update(visible)
            elif key in passthrough:
                output[key] = value
        return output

    def project_write(self, changes: Mapping) -> WriteProjection:
        """
        Split a requested change set into accepted and rejected fields.

        Raises:
            NoWritableSections: the roles can write no section, checked
                before any field is looked at
            NoAcceptedFields: nothing survives column filtering
        """
        self._expect(Operation.WRITE)
        if not self.resolver.sections_with_access():
            raise NoWritableSections()

        projection = WriteProjection()
        for key, value in (changes or {}).items():
            if not isinstance(value, Mapping):
                projection.rejected.append(str(key))
                continue
            section = Section.of(key)
            for column, column_value in value.items():
                ref = ColumnRef.of(section, column)
                if self.resolver.can_access(ref.section, ref.column):
                    projection.accepted.setdefault(section.token, {})[ref.column] = column_value
                else:
                    projection.rejected.append(str(ref))

        if not projection.accepted:
            logger.info(f"Write rejected for roles {sorted(self.resolver.roles)}: {projection.rejected}")
            raise NoAcceptedFields(rejected=projection.rejected)
        return projection
