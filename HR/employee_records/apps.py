"""
Employee Records App Configuration
"""

from django.apps import AppConfig


class EmployeeRecordsConfig(AppConfig):
    """Configuration for the Employee Records app"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'HR.employee_records'
    label = 'employee_records'
    verbose_name = 'Employee Records'
