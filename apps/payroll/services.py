"""
Payroll Services

Mutations behind the payroll sheet: bonuses and per-member settings.

Every function validates its input before touching the database, issues a
single SQL statement, and reports the outcome as a result dictionary:

    {'data': ..., 'error': None, 'error_type': None}             # success
    {'data': None, 'error': 'message', 'error_type': 'NotFoundError'}

Nothing is retried; callers may re-issue the same mutation.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from django.db import connection

from apps.core.exceptions import APIException, NotFoundError, RemoteError, ValidationError

from .calculations import Bonus, PayrollSettings

logger = logging.getLogger(__name__)


def _success(data: Any = None) -> dict:
    return {'data': data, 'error': None, 'error_type': None}


def _failure(exc: APIException) -> dict:
    return {'data': None, 'error': exc.message, 'error_type': exc.__class__.__name__}


def _parse_amount(value: Any, field_name: str) -> Decimal:
    if value is None or value == '':
        raise ValidationError(f'{field_name} is required')
    if isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a number')
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as err:
        raise ValidationError(f'{field_name} must be a number') from err
    if not amount.is_finite():
        raise ValidationError(f'{field_name} must be a number')
    return amount


def _parse_bonus_date(value: date | str | None) -> date:
    if value is None or value == '':
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as err:
        raise ValidationError('bonus_date must be a YYYY-MM-DD date') from err


def validate_bonus_input(
    member_ids: list[UUID | str] | None,
    amount: Any,
    reason: str | None,
) -> tuple[list[str], Decimal, str]:
    """
    Check a bonus request.

    Returns:
        (unique member ids in request order, amount, trimmed reason)

    Raises:
        ValidationError: empty selection, non-positive amount or blank reason
    """
    unique_ids = list(dict.fromkeys(str(member_id) for member_id in (member_ids or [])))
    if not unique_ids:
        raise ValidationError('Please select at least one team member')

    try:
        parsed_amount = _parse_amount(amount, 'amount')
    except ValidationError as err:
        raise ValidationError('Please enter a valid bonus amount') from err
    if parsed_amount <= 0:
        raise ValidationError('Please enter a valid bonus amount')

    if reason is not None and not isinstance(reason, str):
        raise ValidationError('Please enter a reason for the bonus')
    cleaned_reason = (reason or '').strip()
    if not cleaned_reason:
        raise ValidationError('Please enter a reason for the bonus')

    return unique_ids, parsed_amount, cleaned_reason


def validate_payroll_settings_input(
    base_salary: Any,
    commission_percentage: Any,
) -> tuple[Decimal | None, Decimal | None]:
    """
    Check a settings update. None means "use the automatic/default value".

    Raises:
        ValidationError: negative base salary or percentage outside 0-100
    """
    parsed_salary = None
    if base_salary is not None and base_salary != '':
        parsed_salary = _parse_amount(base_salary, 'base_salary')
        if parsed_salary < 0:
            raise ValidationError('Base salary cannot be negative')

    parsed_percentage = None
    if commission_percentage is not None and commission_percentage != '':
        parsed_percentage = _parse_amount(commission_percentage, 'commission_percentage')
        if parsed_percentage < 0 or parsed_percentage > 100:
            raise ValidationError('Commission percentage must be between 0 and 100')

    return parsed_salary, parsed_percentage


def add_bonus(
    *,
    tenant_id: UUID,
    created_by: UUID,
    member_ids: list[UUID | str],
    amount: Any,
    reason: str,
    bonus_date: date | str | None = None,
) -> dict:
    """
    Add the same bonus to each selected team member.

    The insert is all-or-nothing: if any id is not a member of the tenant,
    no bonus is created and a NotFoundError is reported.

    Args:
        tenant_id: The caller's tenant
        created_by: Team member id of the admin adding the bonus
        member_ids: Team members receiving the bonus
        amount: Bonus amount, must be positive
        reason: Why the bonus is paid
        bonus_date: Date of the bonus, defaults to today

    Returns:
        Result dictionary; data is the list of created Bonus records
    """
    try:
        ids, parsed_amount, cleaned_reason = validate_bonus_input(member_ids, amount, reason)
        parsed_date = _parse_bonus_date(bonus_date)
    except ValidationError as e:
        return _failure(e)

    try:
        with connection.cursor() as cursor:
            cursor.execute("""
                WITH targets AS (
                    SELECT id FROM public.team_members
                    WHERE id = ANY(%s::uuid[]) AND tenant_id = %s
                ),
                inserted AS (
                    INSERT INTO public.payroll_bonuses
                        (team_member_id, amount, reason, bonus_date, created_by)
                    SELECT id, %s, %s, %s, %s
                    FROM targets
                    WHERE (SELECT COUNT(*) FROM targets) = %s
                    RETURNING id, team_member_id, amount, reason, bonus_date, created_by
                )
                SELECT
                    i.id,
                    i.team_member_id,
                    i.amount,
                    i.reason,
                    i.bonus_date,
                    i.created_by,
                    creator.full_name AS created_by_name
                FROM inserted i
                LEFT JOIN public.team_members creator ON creator.id = i.created_by
            """, [
                ids,
                str(tenant_id),
                parsed_amount,
                cleaned_reason,
                parsed_date.isoformat(),
                str(created_by),
                len(ids),
            ])
            columns = [col[0] for col in cursor.description]
            rows = [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]
    except Exception as e:
        logger.error(f'Add bonus failed: {e}')
        return _failure(RemoteError(str(e)))

    if not rows:
        return _failure(NotFoundError('One or more team members were not found'))

    logger.info(
        f'Added {parsed_amount} bonus for {len(rows)} team member(s) '
        f'on {parsed_date.isoformat()} by {created_by}'
    )
    return _success([Bonus.from_row(row) for row in rows])


def update_payroll_settings(
    *,
    tenant_id: UUID,
    member_id: UUID | str,
    base_salary: Any,
    commission_percentage: Any,
) -> dict:
    """
    Create or replace a team member's payroll settings.

    The new values apply to every period read afterwards; nothing stored
    for past periods is recomputed.

    Returns:
        Result dictionary; data is the saved PayrollSettings
    """
    try:
        parsed_salary, parsed_percentage = validate_payroll_settings_input(
            base_salary, commission_percentage
        )
    except ValidationError as e:
        return _failure(e)

    try:
        with connection.cursor() as cursor:
            cursor.execute("""
                INSERT INTO public.payroll_settings
                    (team_member_id, base_salary, commission_percentage)
                SELECT id, %s, %s
                FROM public.team_members
                WHERE id = %s AND tenant_id = %s
                ON CONFLICT (team_member_id) DO UPDATE
                SET base_salary = EXCLUDED.base_salary,
                    commission_percentage = EXCLUDED.commission_percentage,
                    updated_at = NOW()
                RETURNING id, team_member_id, base_salary, commission_percentage
            """, [parsed_salary, parsed_percentage, str(member_id), str(tenant_id)])
            columns = [col[0] for col in cursor.description]
            row = cursor.fetchone()
    except Exception as e:
        logger.error(f'Update payroll settings failed: {e}')
        return _failure(RemoteError(str(e)))

    if not row:
        return _failure(NotFoundError('Team member not found'))

    logger.info(
        f'Updated payroll settings for {member_id}: '
        f'base_salary={parsed_salary}, commission_percentage={parsed_percentage}'
    )
    return _success(PayrollSettings.from_row(dict(zip(columns, row, strict=False))))


def delete_bonus(
    *,
    tenant_id: UUID,
    bonus_id: UUID | str,
) -> dict:
    """
    Delete a bonus.

    Deleting a bonus that no longer exists is not an error, so the call
    can be repeated safely.

    Returns:
        Result dictionary; data is True if a row was removed
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("""
                DELETE FROM public.payroll_bonuses pb
                USING public.team_members tm
                WHERE pb.id = %s
                  AND tm.id = pb.team_member_id
                  AND tm.tenant_id = %s
                RETURNING pb.id
            """, [str(bonus_id), str(tenant_id)])
            deleted = cursor.fetchone() is not None
    except Exception as e:
        logger.error(f'Delete bonus failed: {e}')
        return _failure(RemoteError(str(e)))

    if deleted:
        logger.info(f'Deleted bonus {bonus_id}')
    else:
        logger.debug(f'Bonus {bonus_id} already absent')
    return _success(deleted)
