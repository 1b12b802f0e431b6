"""
Serializers for employee record requests
"""
from rest_framework import serializers

from core.security.policy import canonical_action
from core.security.roles import ROLES_BY_VALUE, normalize_role
from core.security.sections import ALL_SECTIONS, canonical_column, canonical_section
from HR.employee_records.dtos import ColumnRuleDTO, PermissionDTO


class RecordChangesSerializer(serializers.Serializer):
    """PATCH body: {"changes": {section: {column: value}}}"""
    changes = serializers.DictField(child=serializers.DictField(allow_empty=True), allow_empty=True)


class ColumnRuleSerializer(serializers.Serializer):
    """Create/replace one column override"""
    role = serializers.CharField(max_length=50)
    section = serializers.CharField(max_length=50)
    column = serializers.CharField(max_length=100)
    can_read = serializers.BooleanField(default=False)
    can_write = serializers.BooleanField(default=False)

    def validate_role(self, value):
        role = normalize_role(value)
        if role not in ROLES_BY_VALUE:
            raise serializers.ValidationError(f"Unknown role '{value}'")
        return role

    def validate_section(self, value):
        section = canonical_section(value)
        if section not in ALL_SECTIONS:
            raise serializers.ValidationError(f"Unknown section '{value}'")
        return section

    def validate_column(self, value):
        column = canonical_column(value)
        if not column:
            raise serializers.ValidationError('Column is required')
        return column

    def to_dto(self):
        data = self.validated_data.copy()
        # Write implies read
        if data.get('can_write'):
            data['can_read'] = True
        return ColumnRuleDTO(**data)


class PermissionSerializer(serializers.Serializer):
    """Create/replace one stored module permission"""
    role = serializers.CharField(max_length=50)
    module = serializers.CharField(max_length=50)
    action = serializers.CharField(max_length=50)
    allowed = serializers.BooleanField(default=False)

    def validate_role(self, value):
        role = normalize_role(value)
        if role not in ROLES_BY_VALUE:
            raise serializers.ValidationError(f"Unknown role '{value}'")
        return role

    def validate_module(self, value):
        module = value.strip().lower()
        if not module:
            raise serializers.ValidationError('Module is required')
        return module

    def validate(self, attrs):
        attrs['action'] = canonical_action(attrs['module'], attrs['action'].strip())
        if not attrs['action']:
            raise serializers.ValidationError({'action': 'Action is required'})
        return attrs

    def to_dto(self):
        return PermissionDTO(**self.validated_data)
