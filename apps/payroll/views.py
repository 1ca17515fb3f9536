"""
Payroll API Views

Provides payroll endpoints for tenant admins:
- GET    /api/payroll                                - Payroll sheet for a month
- PUT    /api/payroll/members/{member_id}/settings   - Update payroll settings
- POST   /api/payroll/bonuses                        - Add a bonus to members
- DELETE /api/payroll/bonuses/{bonus_id}             - Delete a bonus
- GET    /api/payroll/sort-state                     - Next column sort state
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.constants import PAYROLL_SORT_COLUMNS, ROLE_FILTER_ALL, SORT_DIRECTIONS
from apps.core.exceptions import RemoteError, ValidationError
from apps.core.mixins import AuthenticatedAPIView, handle_api_errors
from apps.core.permissions import IsPayrollAdmin

from .calculations import PayrollPolicy, build_payroll_sheet, next_sort_state
from .periods import Period
from .selectors import get_payroll_roster
from .services import add_bonus, delete_bonus, update_payroll_settings

logger = logging.getLogger(__name__)


def parse_sort_params(column: str | None, direction: str | None) -> tuple[str | None, str]:
    """Validate sort query params. An empty column means unsorted."""
    column = column or None
    direction = direction or 'desc'
    if column is not None and column not in PAYROLL_SORT_COLUMNS:
        raise ValidationError(f"sort must be one of: {', '.join(PAYROLL_SORT_COLUMNS)}")
    if direction not in SORT_DIRECTIONS:
        raise ValidationError("direction must be 'asc' or 'desc'")
    return column, direction


class PayrollSheetView(AuthenticatedAPIView, APIView):
    """
    GET /api/payroll?month=1&year=2026&role=chatter&sort=total_pay&direction=desc

    Get the payroll sheet for a month.

    Query params:
        month: 1-12, defaults to the current month
        year: defaults to the current year
        role: 'all' (default) or an exact role
        sort: 'net_sales', 'total_pay' or omitted (roster order, by name)
        direction: 'desc' (default) or 'asc'

    Response (200):
        {
            "period": {"month": 1, "year": 2026, "label": "January 2026", ...},
            "filters": {"role": "all", "sort": null, "direction": "desc"},
            "roles": ["admin", "chatter"],
            "rows": [{"id": "uuid", "full_name": "...", "net_sales": 8000.0, ...}],
            "totals": {"base_salary": 450.0, "commission": 200.0, ...}
        }

    Errors:
        400: invalid month, year, sort or direction
        502: the roster query failed (database message passed through)
    """
    permission_classes = [IsPayrollAdmin]

    @handle_api_errors
    def get(self, request):
        user = self.get_user(request)

        params = request.query_params
        period = Period.from_params(params.get('month'), params.get('year'))
        role = params.get('role') or ROLE_FILTER_ALL
        sort_column, direction = parse_sort_params(params.get('sort'), params.get('direction'))

        try:
            roster = get_payroll_roster(user.tenant_id, period)
        except Exception as e:
            logger.error(f'Payroll roster failed: {e}')
            raise RemoteError(str(e)) from e

        sheet = build_payroll_sheet(
            roster,
            role=role,
            sort_column=sort_column,
            direction=direction,
            policy=PayrollPolicy.from_settings(),
        )

        return Response({
            'period': period.to_dict(),
            'filters': {'role': role, 'sort': sort_column, 'direction': direction},
            'roles': sorted({member.role for member in roster}),
            **sheet.to_dict(),
        })


class PayrollSettingsView(AuthenticatedAPIView, APIView):
    """
    PUT /api/payroll/members/{member_id}/settings

    Create or replace a member's payroll settings.

    Request body:
        {
            "base_salary": 500,              // 0 or null = auto-calculate
            "commission_percentage": 3.5     // null = default 2.5
        }
    """
    permission_classes = [IsPayrollAdmin]

    @handle_api_errors
    def put(self, request, member_id):
        user = self.get_user(request)
        member_uuid = self.parse_uuid(member_id, 'member_id')

        data = request.data
        result = update_payroll_settings(
            tenant_id=user.tenant_id,
            member_id=member_uuid,
            base_salary=data.get('base_salary'),
            commission_percentage=data.get('commission_percentage'),
        )
        settings = result['data']
        return self.result_response(
            result,
            {'payroll_settings': settings.to_dict() if settings else None},
        )


class BonusesView(AuthenticatedAPIView, APIView):
    """
    POST /api/payroll/bonuses

    Add the same bonus to one or more team members.

    Request body:
        {
            "member_ids": ["uuid", "uuid"],
            "amount": 100,
            "reason": "Top seller",
            "bonus_date": "2026-01-15"    // optional, defaults to today
        }

    Response (201):
        {"error": null, "bonuses": [...]}
    """
    permission_classes = [IsPayrollAdmin]

    @handle_api_errors
    def post(self, request):
        user = self.get_user(request)

        data = request.data
        member_ids = data.get('member_ids') or []
        if not isinstance(member_ids, list):
            raise ValidationError('member_ids must be a list')
        member_uuids = [self.parse_uuid(member_id, 'member_id') for member_id in member_ids]

        result = add_bonus(
            tenant_id=user.tenant_id,
            created_by=user.id,
            member_ids=member_uuids,
            amount=data.get('amount'),
            reason=data.get('reason'),
            bonus_date=data.get('bonus_date'),
        )
        bonuses = result['data'] or []
        return self.result_response(
            result,
            {'bonuses': [bonus.to_dict() for bonus in bonuses]},
            status_code=status.HTTP_201_CREATED,
        )


class BonusDetailView(AuthenticatedAPIView, APIView):
    """
    DELETE /api/payroll/bonuses/{bonus_id}

    Delete a bonus. Repeating the call is harmless.

    Response (200):
        {"error": null, "deleted": true}
    """
    permission_classes = [IsPayrollAdmin]

    @handle_api_errors
    def delete(self, request, bonus_id):
        user = self.get_user(request)
        bonus_uuid = self.parse_uuid(bonus_id, 'bonus_id')

        result = delete_bonus(tenant_id=user.tenant_id, bonus_id=bonus_uuid)
        return self.result_response(result, {'deleted': bool(result['data'])})


class SortStateView(AuthenticatedAPIView, APIView):
    """
    GET /api/payroll/sort-state?sort=net_sales&direction=desc&clicked=net_sales

    Get the sort state after clicking a column header.
    Same column cycles desc -> asc -> unsorted; a new column starts at desc.

    Response (200):
        {"sort": "net_sales", "direction": "asc"}
    """
    permission_classes = [IsPayrollAdmin]

    @handle_api_errors
    def get(self, request):
        self.get_user(request)

        params = request.query_params
        sort_column, direction = parse_sort_params(params.get('sort'), params.get('direction'))
        clicked = params.get('clicked')
        if not clicked:
            raise ValidationError('clicked is required')

        next_column, next_direction = next_sort_state(sort_column, direction, clicked)
        return Response({'sort': next_column, 'direction': next_direction})
