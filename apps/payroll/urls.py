"""
Payroll API URLs

All routes are relative to /api/payroll/
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.PayrollSheetView.as_view(), name='payroll_sheet'),
    path('sort-state', views.SortStateView.as_view(), name='payroll_sort_state'),
    path('members/<str:member_id>/settings', views.PayrollSettingsView.as_view(), name='payroll_settings'),
    path('bonuses', views.BonusesView.as_view(), name='payroll_bonuses'),
    path('bonuses/<str:bonus_id>', views.BonusDetailView.as_view(), name='payroll_bonus_detail'),
]
