"""
Payroll Selectors

Read queries that assemble a period's payroll roster for one tenant.
"""
import logging
from collections import defaultdict
from uuid import UUID

from django.db import connection

from apps.core.constants import VALID_SALE_STATUS

from .calculations import (
    AttendanceSummary,
    Bonus,
    PayrollSettings,
    TeamMember,
    summarize_attendance,
    to_decimal,
)
from .periods import Period

logger = logging.getLogger(__name__)


def _fetch_dicts(cursor) -> list[dict]:
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]


def get_payroll_roster(tenant_id: UUID, period: Period) -> list[TeamMember]:
    """
    Get every team member of a tenant annotated for payroll.

    Each member carries:
    - total_valid_sales: sum of 'valid' chatter_sales dated inside the period
    - payroll_settings: the member's settings row or None
    - bonuses: bonuses dated inside the period, with the creator's name
    - attendance: the period's attendance records summarized

    Args:
        tenant_id: The caller's tenant
        period: The (month, year) being displayed

    Returns:
        Team members ordered by full_name
    """
    start = period.start_date.isoformat()
    end = period.end_date.isoformat()
    tenant = str(tenant_id)

    with connection.cursor() as cursor:
        cursor.execute("""
            SELECT id, full_name, email, role, shift, is_active
            FROM public.team_members
            WHERE tenant_id = %s
            ORDER BY full_name ASC
        """, [tenant])
        members = _fetch_dicts(cursor)

        if not members:
            return []

        cursor.execute("""
            SELECT ps.id, ps.team_member_id, ps.base_salary, ps.commission_percentage
            FROM public.payroll_settings ps
            INNER JOIN public.team_members tm ON tm.id = ps.team_member_id
            WHERE tm.tenant_id = %s
        """, [tenant])
        settings_rows = _fetch_dicts(cursor)

        cursor.execute("""
            SELECT
                pb.id,
                pb.team_member_id,
                pb.amount,
                pb.reason,
                pb.bonus_date,
                pb.created_by,
                creator.full_name AS created_by_name
            FROM public.payroll_bonuses pb
            INNER JOIN public.team_members tm ON tm.id = pb.team_member_id
            LEFT JOIN public.team_members creator ON creator.id = pb.created_by
            WHERE tm.tenant_id = %s
              AND pb.bonus_date >= %s
              AND pb.bonus_date <= %s
            ORDER BY pb.bonus_date ASC, pb.created_at ASC
        """, [tenant, start, end])
        bonus_rows = _fetch_dicts(cursor)

        cursor.execute("""
            SELECT cs.chatter_id, COALESCE(SUM(cs.gross_amount), 0) AS total_valid_sales
            FROM public.chatter_sales cs
            INNER JOIN public.team_members tm ON tm.id = cs.chatter_id
            WHERE tm.tenant_id = %s
              AND cs.status = %s
              AND cs.sale_date >= %s
              AND cs.sale_date <= %s
            GROUP BY cs.chatter_id
        """, [tenant, VALID_SALE_STATUS, start, end])
        sales_rows = _fetch_dicts(cursor)

        cursor.execute("""
            SELECT ar.team_member_id, ar.status, ar.clock_in_time, ar.clock_out_time
            FROM public.attendance_records ar
            INNER JOIN public.team_members tm ON tm.id = ar.team_member_id
            WHERE tm.tenant_id = %s
              AND ar.date >= %s
              AND ar.date <= %s
        """, [tenant, start, end])
        attendance_rows = _fetch_dicts(cursor)

    logger.debug(
        f'Payroll roster for tenant {tenant_id} {period.month}/{period.year}: '
        f'{len(members)} members, {len(sales_rows)} sellers, {len(bonus_rows)} bonuses, '
        f'{len(attendance_rows)} attendance records'
    )

    settings_by_member = {str(row['team_member_id']): row for row in settings_rows}
    sales_by_member = {str(row['chatter_id']): row['total_valid_sales'] for row in sales_rows}

    bonuses_by_member: dict[str, list[Bonus]] = defaultdict(list)
    for row in bonus_rows:
        bonuses_by_member[str(row['team_member_id'])].append(Bonus.from_row(row))

    attendance_by_member: dict[str, list[dict]] = defaultdict(list)
    for row in attendance_rows:
        attendance_by_member[str(row['team_member_id'])].append(row)

    roster = []
    for member in members:
        key = str(member['id'])
        records = attendance_by_member.get(key)
        roster.append(TeamMember(
            id=member['id'],
            full_name=member['full_name'] or '',
            email=member['email'],
            role=member['role'] or '',
            shift=member['shift'],
            is_active=True if member['is_active'] is None else member['is_active'],
            total_valid_sales=to_decimal(sales_by_member.get(key)),
            payroll_settings=PayrollSettings.from_row(settings_by_member.get(key)),
            bonuses=tuple(bonuses_by_member.get(key, ())),
            attendance=summarize_attendance(records) if records else AttendanceSummary(),
        ))
    return roster

