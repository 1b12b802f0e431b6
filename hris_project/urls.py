"""
URL configuration for hris_project project.
"""
from django.urls import path, include

urlpatterns = [
    path('hr/', include('HR.urls')),
]
