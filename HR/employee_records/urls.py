"""
URL configuration for HR Employee Records module.
"""
from django.urls import path

from . import views

app_name = 'employee_records'

urlpatterns = [
    # Employee record endpoints
    path('employees/<str:employee_id>/', views.employee_record, name='employee_record'),
    path('employees/<str:employee_id>/access/', views.employee_access, name='employee_access'),

    # Column rule endpoints
    path('rbac/columns/', views.column_rules, name='column_rules'),

    # Role and module permission endpoints
    path('rbac/roles/', views.rbac_roles, name='rbac_roles'),
    path('rbac/permissions/', views.rbac_permissions, name='rbac_permissions'),
    path('rbac/me/', views.rbac_me, name='rbac_me'),

    # Report endpoints
    path('reports/<str:report_id>/', views.employee_report, name='employee_report'),
]
