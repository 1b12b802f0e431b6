"""
HR App - Main URL Configuration
This file routes URLs to the appropriate sub-apps within the HR module.
"""
from django.urls import path, include

app_name = 'hr'

urlpatterns = [
    # Employee records with field security
    path('', include('HR.employee_records.urls')),
]
