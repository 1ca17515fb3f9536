"""
URL Configuration for the Payroll Backend API

All routes are prefixed with /api/ to match the front-end conventions.
"""
from django.urls import include, path

from apps.core.views import health_check

urlpatterns = [
    # Health check endpoint (public)
    path('api/health', health_check, name='health_check'),

    # Payroll sheet, payroll settings and bonuses
    path('api/payroll/', include('apps.payroll.urls')),
]
