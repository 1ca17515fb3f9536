"""
Payroll Calculations

Pure functions turning a period's roster into pay rows and totals.
Nothing here touches the database; selectors build the roster and
services persist changes.

Formulas:
    net_sales  = gross_sales * 0.8                  (20% platform fee)
    base       = explicit base_salary if set and non-zero,
                 else chatter tier (450 if net_sales >= 8000, else 250),
                 else 0
    commission = net_sales * (commission_percentage or 2.5) / 100
    total_pay  = base + commission + sum(bonuses)
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any
from uuid import UUID

from apps.core.constants import (
    FULL_SHIFT_HOURS,
    PAYROLL,
    PAYROLL_SORT_COLUMNS,
    ROLE_FILTER_ALL,
    SORT_DIRECTIONS,
)
from apps.core.exceptions import ValidationError

if TYPE_CHECKING:
    from .periods import Period

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def to_decimal(value: Any) -> Decimal:
    """Coerce a DB/JSON number to Decimal; None, NaN, infinities and garbage become 0."""
    if value is None:
        return ZERO
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        number = None
    if number is None or not number.is_finite():
        logger.warning(f'Non-numeric payroll value treated as 0: {value!r}')
        return ZERO
    return number


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def money(value: Decimal) -> float:
    """Render a Decimal amount for JSON (two decimal places)."""
    return float(value.quantize(Decimal('0.01')))


# ============================================================================
# Data Transfer Objects (DTOs)
# ============================================================================

@dataclass(frozen=True)
class PayrollPolicy:
    """Constants of the pay formula."""
    net_sales_rate: Decimal = Decimal(PAYROLL['net_sales_rate'])
    chatter_threshold: Decimal = Decimal(PAYROLL['chatter_threshold'])
    chatter_base_salary_high: Decimal = Decimal(PAYROLL['chatter_base_salary_high'])
    chatter_base_salary_low: Decimal = Decimal(PAYROLL['chatter_base_salary_low'])
    default_commission_percentage: Decimal = Decimal(PAYROLL['default_commission_percentage'])

    @classmethod
    def from_settings(cls) -> PayrollPolicy:
        """Apply PAYROLL_* overrides from Django settings."""
        from django.conf import settings

        threshold = getattr(settings, 'PAYROLL_CHATTER_THRESHOLD', None)
        commission = getattr(settings, 'PAYROLL_DEFAULT_COMMISSION_PERCENTAGE', None)
        overrides = {}
        if threshold not in (None, ''):
            overrides['chatter_threshold'] = to_decimal(threshold)
        if commission not in (None, ''):
            overrides['default_commission_percentage'] = to_decimal(commission)
        return cls(**overrides)


@dataclass(frozen=True)
class PayrollSettings:
    """Per-member overrides. None base_salary means auto-calculate."""
    base_salary: Decimal | None = None
    commission_percentage: Decimal | None = None
    id: UUID | None = None

    @classmethod
    def from_row(cls, row: dict | None) -> PayrollSettings | None:
        if not row:
            return None
        return cls(
            base_salary=_optional_decimal(row.get('base_salary')),
            commission_percentage=_optional_decimal(row.get('commission_percentage')),
            id=row.get('id'),
        )

    def to_dict(self) -> dict:
        return {
            'id': str(self.id) if self.id else None,
            'base_salary': money(self.base_salary) if self.base_salary is not None else None,
            'commission_percentage': (
                float(self.commission_percentage) if self.commission_percentage is not None else None
            ),
        }


@dataclass(frozen=True)
class Bonus:
    id: UUID
    team_member_id: UUID
    amount: Decimal
    reason: str
    bonus_date: date
    created_by: UUID | None = None
    created_by_name: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> Bonus:
        bonus_date = row.get('bonus_date')
        if isinstance(bonus_date, str):
            bonus_date = date.fromisoformat(bonus_date[:10])
        return cls(
            id=row['id'],
            team_member_id=row['team_member_id'],
            amount=to_decimal(row.get('amount')),
            reason=row.get('reason') or '',
            bonus_date=bonus_date,
            created_by=row.get('created_by'),
            created_by_name=row.get('created_by_name'),
        )

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'team_member_id': str(self.team_member_id),
            'amount': money(self.amount),
            'reason': self.reason,
            'bonus_date': self.bonus_date.isoformat() if self.bonus_date else None,
            'created_by': str(self.created_by) if self.created_by else None,
            'created_by_member': (
                {'id': str(self.created_by), 'full_name': self.created_by_name}
                if self.created_by_name else None
            ),
        }


@dataclass(frozen=True)
class AttendanceSummary:
    days_worked: int = 0
    missed_hours: Decimal = ZERO
    no_show_days: int = 0
    days_off: int = 0
    late_count: int = 0
    left_early_count: int = 0

    def to_dict(self) -> dict:
        return {
            'days_worked': self.days_worked,
            'missed_hours': money(self.missed_hours),
            'no_show_days': self.no_show_days,
            'days_off': self.days_off,
            'late_count': self.late_count,
            'left_early_count': self.left_early_count,
        }


@dataclass(frozen=True)
class TeamMember:
    """A roster entry for one period. Immutable within a computation pass."""
    id: UUID
    full_name: str
    email: str | None
    role: str
    total_valid_sales: Decimal = ZERO
    payroll_settings: PayrollSettings | None = None
    bonuses: tuple[Bonus, ...] = ()
    shift: str | None = None
    is_active: bool = True
    attendance: AttendanceSummary = field(default_factory=AttendanceSummary)

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'full_name': self.full_name,
            'email': self.email,
            'role': self.role,
            'shift': self.shift,
            'is_active': self.is_active,
            'total_valid_sales': money(to_decimal(self.total_valid_sales)),
            'payroll_settings': self.payroll_settings.to_dict() if self.payroll_settings else None,
            'bonuses': [bonus.to_dict() for bonus in self.bonuses],
            'attendance': self.attendance.to_dict(),
        }


@dataclass(frozen=True)
class PayrollRow:
    """Derived pay figures for one member. Never persisted."""
    member: TeamMember
    net_sales: Decimal
    base_salary: Decimal
    commission: Decimal
    bonus_total: Decimal
    total_pay: Decimal
    commission_percentage: Decimal
    is_auto_base_salary: bool

    def to_dict(self) -> dict:
        data = self.member.to_dict()
        data.update({
            'net_sales': money(self.net_sales),
            'base_salary': money(self.base_salary),
            'is_auto_base_salary': self.is_auto_base_salary,
            'commission_percentage': float(self.commission_percentage),
            'commission': money(self.commission),
            'bonus_total': money(self.bonus_total),
            'bonus_count': len(self.member.bonuses),
            'total_pay': money(self.total_pay),
        })
        return data


@dataclass(frozen=True)
class PayrollTotals:
    base_salary: Decimal = ZERO
    commission: Decimal = ZERO
    bonuses: Decimal = ZERO
    net_sales: Decimal = ZERO
    gross_sales: Decimal = ZERO
    total: Decimal = ZERO
    member_count: int = 0

    def to_dict(self) -> dict:
        return {
            'base_salary': money(self.base_salary),
            'commission': money(self.commission),
            'bonuses': money(self.bonuses),
            'net_sales': money(self.net_sales),
            'gross_sales': money(self.gross_sales),
            'total': money(self.total),
            'member_count': self.member_count,
        }


@dataclass(frozen=True)
class PayrollSheet:
    rows: list[PayrollRow]
    totals: PayrollTotals

    def to_dict(self) -> dict:
        return {
            'rows': [row.to_dict() for row in self.rows],
            'totals': self.totals.to_dict(),
        }


# ============================================================================
# Row computation
# ============================================================================

def compute_net_sales(gross_sales: Any, policy: PayrollPolicy | None = None) -> Decimal:
    policy = policy or PayrollPolicy()
    return to_decimal(gross_sales) * policy.net_sales_rate


def compute_base_salary(
    role: str,
    net_sales: Decimal,
    settings: PayrollSettings | None,
    policy: PayrollPolicy | None = None,
) -> tuple[Decimal, bool]:
    """
    Return (base_salary, is_auto).

    An explicit base salary of 0 is treated the same as unset.
    """
    policy = policy or PayrollPolicy()
    explicit = to_decimal(settings.base_salary) if settings and settings.base_salary is not None else ZERO
    if explicit != ZERO:
        return explicit, False
    if role == 'chatter':
        if net_sales >= policy.chatter_threshold:
            return policy.chatter_base_salary_high, True
        return policy.chatter_base_salary_low, True
    return ZERO, False


def commission_percentage_for(settings: PayrollSettings | None, policy: PayrollPolicy | None = None) -> Decimal:
    """An explicit 0% is honoured; only a missing value falls back to the default."""
    policy = policy or PayrollPolicy()
    if settings is None or settings.commission_percentage is None:
        return policy.default_commission_percentage
    return to_decimal(settings.commission_percentage)


def compute_row(member: TeamMember, policy: PayrollPolicy | None = None) -> PayrollRow:
    """Compute one member's pay row. Never raises on odd (negative, zero, missing) inputs."""
    policy = policy or PayrollPolicy()
    settings = member.payroll_settings

    net_sales = compute_net_sales(member.total_valid_sales, policy)
    base_salary, is_auto = compute_base_salary(member.role, net_sales, settings, policy)
    percentage = commission_percentage_for(settings, policy)
    commission = net_sales * percentage / Decimal('100')
    bonus_total = sum((to_decimal(bonus.amount) for bonus in member.bonuses), ZERO)

    return PayrollRow(
        member=member,
        net_sales=net_sales,
        base_salary=base_salary,
        commission=commission,
        bonus_total=bonus_total,
        total_pay=base_salary + commission + bonus_total,
        commission_percentage=percentage,
        is_auto_base_salary=is_auto,
    )


# ============================================================================
# Filtering, sorting, totals
# ============================================================================

def filter_by_role(roster: Iterable[TeamMember], role: str | None) -> list[TeamMember]:
    """Exact role match; 'all' (or no role) keeps everyone. Order is preserved."""
    if not role or role == ROLE_FILTER_ALL:
        return list(roster)
    return [member for member in roster if member.role == role]


def sort_rows(rows: Iterable[PayrollRow], column: str | None, direction: str = 'desc') -> list[PayrollRow]:
    """
    Order rows by a computed column.

    With no column the incoming order (the roster's full_name order) is kept.
    """
    rows = list(rows)
    if column is None:
        return rows
    if column not in PAYROLL_SORT_COLUMNS:
        raise ValidationError(f'Cannot sort by {column!r}')
    if direction not in SORT_DIRECTIONS:
        raise ValidationError(f'Invalid sort direction {direction!r}')
    return sorted(rows, key=lambda row: getattr(row, column), reverse=direction == 'desc')


def next_sort_state(
    current_column: str | None,
    current_direction: str,
    clicked_column: str,
) -> tuple[str | None, str]:
    """
    Column header click cycle: desc -> asc -> unsorted.

    Clicking a different column always starts at desc.
    """
    if clicked_column not in PAYROLL_SORT_COLUMNS:
        raise ValidationError(f'Cannot sort by {clicked_column!r}')
    if clicked_column != current_column:
        return clicked_column, 'desc'
    if current_direction == 'desc':
        return clicked_column, 'asc'
    return None, 'desc'


def aggregate(rows: Iterable[PayrollRow]) -> PayrollTotals:
    """Sum already computed rows; there is no second computation path."""
    base_salary = commission = bonuses = net_sales = gross_sales = total = ZERO
    count = 0
    for row in rows:
        base_salary += row.base_salary
        commission += row.commission
        bonuses += row.bonus_total
        net_sales += row.net_sales
        gross_sales += to_decimal(row.member.total_valid_sales)
        total += row.total_pay
        count += 1
    return PayrollTotals(
        base_salary=base_salary,
        commission=commission,
        bonuses=bonuses,
        net_sales=net_sales,
        gross_sales=gross_sales,
        total=total,
        member_count=count,
    )


def build_payroll_sheet(
    roster: Iterable[TeamMember],
    role: str | None = ROLE_FILTER_ALL,
    sort_column: str | None = None,
    direction: str = 'desc',
    policy: PayrollPolicy | None = None,
) -> PayrollSheet:
    """Filter, compute, sort and total a roster in one pass."""
    policy = policy or PayrollPolicy()
    rows = [compute_row(member, policy) for member in filter_by_role(roster, role)]
    rows = sort_rows(rows, sort_column, direction)
    return PayrollSheet(rows=rows, totals=aggregate(rows))


# ============================================================================
# Attendance
# ============================================================================

def parse_time_to_hours(value: str | None) -> Decimal:
    """Parse 'H:MM' (e.g. '2:30') into hours. Anything unparsable counts as 0."""
    if not value:
        return ZERO
    parts = value.split(':')
    if len(parts) < 2:
        return ZERO
    try:
        hours = int(parts[0])
    except ValueError:
        hours = 0
    try:
        minutes = int(parts[1])
    except ValueError:
        minutes = 0
    return Decimal(hours) + Decimal(minutes) / Decimal(60)


def summarize_attendance(records: Iterable[dict]) -> AttendanceSummary:
    """Fold a member's attendance records for a period into counters."""
    days_worked = no_show_days = days_off = late_count = left_early_count = 0
    missed_hours = ZERO

    for record in records:
        status = record.get('status')
        clock_in = record.get('clock_in_time')
        clock_out = record.get('clock_out_time')

        if status == 'on_time':
            days_worked += 1
        elif status == 'late':
            days_worked += 1
            late_count += 1
            missed_hours += parse_time_to_hours(clock_in)
        elif status == 'left_early':
            days_worked += 1
            left_early_count += 1
            missed_hours += parse_time_to_hours(clock_out)
        elif status == 'late_and_left_early':
            days_worked += 1
            late_count += 1
            left_early_count += 1
            missed_hours += parse_time_to_hours(clock_in) + parse_time_to_hours(clock_out)
        elif status == 'no_show':
            no_show_days += 1
            missed_hours += Decimal(FULL_SHIFT_HOURS)
        elif status == 'day_off':
            days_off += 1

    return AttendanceSummary(
        days_worked=days_worked,
        missed_hours=missed_hours,
        no_show_days=no_show_days,
        days_off=days_off,
        late_count=late_count,
        left_early_count=left_early_count,
    )


# ============================================================================
# Local state updates after a successful mutation
# ============================================================================

def apply_payroll_settings(
    roster: Iterable[TeamMember],
    member_id: UUID | str,
    settings: PayrollSettings,
) -> list[TeamMember]:
    return [
        replace(member, payroll_settings=settings) if str(member.id) == str(member_id) else member
        for member in roster
    ]


def merge_bonuses(roster: Iterable[TeamMember], bonuses: Iterable[Bonus], period: Period) -> list[TeamMember]:
    """
    Attach newly created bonuses to their members.

    A bonus only shows in the period containing its bonus_date, the same
    rule the roster query applies, so a re-fetch never disagrees.
    """
    by_member: dict[str, list[Bonus]] = {}
    for bonus in bonuses:
        if period.contains(bonus.bonus_date):
            by_member.setdefault(str(bonus.team_member_id), []).append(bonus)

    merged = []
    for member in roster:
        new_bonuses = by_member.get(str(member.id))
        if new_bonuses:
            member = replace(member, bonuses=member.bonuses + tuple(new_bonuses))
        merged.append(member)
    return merged


def remove_bonus(roster: Iterable[TeamMember], bonus_id: UUID | str) -> list[TeamMember]:
    removed = []
    for member in roster:
        kept = tuple(bonus for bonus in member.bonuses if str(bonus.id) != str(bonus_id))
        if len(kept) != len(member.bonuses):
            member = replace(member, bonuses=kept)
        removed.append(member)
    return removed
