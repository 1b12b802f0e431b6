"""
Data Transfer Objects for Employee Records
"""

from dataclasses import dataclass


@dataclass
class ColumnRuleDTO:
    """DTO for upserting one column override"""
    role: str
    section: str
    column: str
    can_read: bool = False
    can_write: bool = False


@dataclass
class PermissionDTO:
    """DTO for replacing one stored module permission"""
    role: str
    module: str
    action: str
    allowed: bool = False
