"""
Employee Records Domain

Handles employee records stored one table per section
(employee_core, employee_contact, ...) with field-level security:
- Redacted reads
- Filtered, all-or-nothing writes
- Column rule administration
"""
