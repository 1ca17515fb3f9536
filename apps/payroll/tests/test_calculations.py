"""
Payroll Calculation Tests

Tests the pay formula:
    net_sales  = gross_sales * 0.8
    base       = explicit base salary, else chatter tier (450 / 250 around 8000 net), else 0
    commission = net_sales * (commission_percentage or 2.5) / 100
    total_pay  = base + commission + bonuses
"""
import uuid
from datetime import date
from decimal import Decimal

import pytest

from apps.core.exceptions import ValidationError
from apps.payroll.calculations import (
    PayrollPolicy,
    PayrollSettings,
    aggregate,
    apply_payroll_settings,
    build_payroll_sheet,
    compute_row,
    filter_by_role,
    merge_bonuses,
    next_sort_state,
    parse_time_to_hours,
    remove_bonus,
    sort_rows,
    summarize_attendance,
)
from apps.payroll.periods import Period
from tests.factories import BonusFactory, PayrollSettingsFactory, TeamMemberFactory


# =============================================================================
# compute_row
# =============================================================================

class TestComputeRow:

    def test_scenario_chatter_with_bonus(self):
        """
        Chatter, gross 12500, no settings, one 100 bonus:
        net 10000, base 450, commission 250, total 800.
        """
        member = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('12500'),
            bonuses=(BonusFactory(amount=Decimal('100')),),
        )

        row = compute_row(member)

        assert row.net_sales == Decimal('10000')
        assert row.base_salary == Decimal('450')
        assert row.commission == Decimal('250')
        assert row.bonus_total == Decimal('100')
        assert row.total_pay == Decimal('800')
        assert row.is_auto_base_salary is True

    def test_chatter_exactly_at_threshold_gets_high_tier(self):
        member = TeamMemberFactory(role='chatter', total_valid_sales=Decimal('10000'))

        row = compute_row(member)

        assert row.net_sales == Decimal('8000')
        assert row.base_salary == Decimal('450')

    def test_chatter_just_below_threshold_gets_low_tier(self):
        member = TeamMemberFactory(role='chatter', total_valid_sales=Decimal('9999.99'))

        row = compute_row(member)

        assert row.net_sales == Decimal('7999.992')
        assert row.base_salary == Decimal('250')

    def test_float_sales_are_handled_exactly(self):
        member = TeamMemberFactory(role='chatter', total_valid_sales=9999.99)

        assert compute_row(member).base_salary == Decimal('250')

    @pytest.mark.parametrize('role', ['owner', 'admin', 'manager', 'designer'])
    def test_non_chatter_without_base_salary_gets_zero(self, role):
        member = TeamMemberFactory(role=role, total_valid_sales=Decimal('50000'))

        row = compute_row(member)

        assert row.base_salary == Decimal('0')
        assert row.is_auto_base_salary is False

    def test_default_commission_is_two_and_a_half_percent(self):
        member = TeamMemberFactory(role='manager', total_valid_sales=Decimal('1250'))

        row = compute_row(member)

        assert row.net_sales == Decimal('1000')
        assert row.commission == Decimal('25.00')
        assert row.commission_percentage == Decimal('2.5')

    def test_explicit_settings_override_defaults(self):
        member = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('1000'),
            payroll_settings=PayrollSettingsFactory(
                base_salary=Decimal('100'),
                commission_percentage=Decimal('50'),
            ),
        )

        row = compute_row(member)

        assert row.base_salary == Decimal('100')
        assert row.commission == Decimal('400')
        assert row.total_pay == Decimal('500')
        assert row.is_auto_base_salary is False

    def test_zero_base_salary_means_auto(self):
        member = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('0'),
            payroll_settings=PayrollSettingsFactory(base_salary=Decimal('0')),
        )

        row = compute_row(member)

        assert row.base_salary == Decimal('250')
        assert row.is_auto_base_salary is True

    def test_zero_commission_percentage_is_honoured(self):
        member = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('5000'),
            payroll_settings=PayrollSettingsFactory(commission_percentage=Decimal('0')),
        )

        assert compute_row(member).commission == Decimal('0')

    def test_settings_without_commission_fall_back_to_default(self):
        member = TeamMemberFactory(
            role='manager',
            total_valid_sales=Decimal('1250'),
            payroll_settings=PayrollSettingsFactory(base_salary=Decimal('300')),
        )

        row = compute_row(member)

        assert row.base_salary == Decimal('300')
        assert row.commission == Decimal('25')

    def test_negative_inputs_do_not_raise(self):
        member = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('-500'),
            payroll_settings=PayrollSettingsFactory(base_salary=Decimal('-10')),
            bonuses=(BonusFactory(amount=Decimal('-5')),),
        )

        row = compute_row(member)

        assert row.net_sales == Decimal('-400')
        assert row.base_salary == Decimal('-10')
        assert row.total_pay == row.base_salary + row.commission + row.bonus_total

    @pytest.mark.parametrize('value', [float('nan'), Decimal('NaN'), 'Infinity', Decimal('-Infinity')])
    def test_non_finite_sales_count_as_zero(self, value):
        member = TeamMemberFactory(role='chatter', total_valid_sales=value)

        row = compute_row(member)

        assert row.net_sales == Decimal('0')
        assert row.base_salary == Decimal('250')
        assert row.total_pay == Decimal('250')

    def test_non_finite_settings_and_bonuses_count_as_zero(self):
        member = TeamMemberFactory(
            role='manager',
            total_valid_sales=Decimal('1250'),
            payroll_settings=PayrollSettingsFactory(
                base_salary=Decimal('NaN'),
                commission_percentage=Decimal('Infinity'),
            ),
            bonuses=(BonusFactory(amount=Decimal('NaN')),),
        )

        row = compute_row(member)

        assert row.base_salary == Decimal('0')
        assert row.commission == Decimal('0')
        assert row.bonus_total == Decimal('0')

    def test_missing_sales_are_zero(self):
        member = TeamMemberFactory(role='chatter', total_valid_sales=None)

        row = compute_row(member)

        assert row.net_sales == Decimal('0')
        assert row.base_salary == Decimal('250')

    def test_bonus_total_sums_every_bonus(self):
        member = TeamMemberFactory(
            role='admin',
            bonuses=(
                BonusFactory(amount=Decimal('10.50')),
                BonusFactory(amount=Decimal('20.25')),
                BonusFactory(amount=Decimal('5')),
            ),
        )

        row = compute_row(member)

        assert row.bonus_total == Decimal('35.75')
        assert row.total_pay == Decimal('35.75')

    def test_with_bonus_trait_attaches_bonus_to_member(self):
        member = TeamMemberFactory(role='admin', with_bonus=True)

        assert member.bonuses[0].team_member_id == member.id
        assert compute_row(member).bonus_total == Decimal('100')

    def test_policy_threshold_can_be_changed(self):
        member = TeamMemberFactory(role='chatter', total_valid_sales=Decimal('10000'))
        policy = PayrollPolicy(chatter_threshold=Decimal('10000'))

        assert compute_row(member, policy).base_salary == Decimal('250')

    def test_policy_from_settings(self, settings):
        settings.PAYROLL_CHATTER_THRESHOLD = '12000'
        settings.PAYROLL_DEFAULT_COMMISSION_PERCENTAGE = '3'

        policy = PayrollPolicy.from_settings()

        assert policy.chatter_threshold == Decimal('12000')
        assert policy.default_commission_percentage == Decimal('3')
        assert policy.net_sales_rate == Decimal('0.8')


# =============================================================================
# filter_by_role / sort_rows / next_sort_state
# =============================================================================

class TestFilterByRole:

    def setup_method(self):
        self.roster = [
            TeamMemberFactory(full_name='Alice', role='chatter'),
            TeamMemberFactory(full_name='Bob', role='admin'),
            TeamMemberFactory(full_name='Cara', role='chatter'),
            TeamMemberFactory(full_name='Dan', role='manager'),
        ]

    def test_all_keeps_everyone_in_order(self):
        assert filter_by_role(self.roster, 'all') == self.roster

    def test_empty_role_keeps_everyone(self):
        assert filter_by_role(self.roster, None) == self.roster
        assert filter_by_role(self.roster, '') == self.roster

    def test_exact_match_preserves_relative_order(self):
        result = filter_by_role(self.roster, 'chatter')

        assert [m.full_name for m in result] == ['Alice', 'Cara']

    def test_match_is_case_sensitive(self):
        assert filter_by_role(self.roster, 'Chatter') == []


class TestSortRows:

    def setup_method(self):
        roster = [
            TeamMemberFactory(full_name='Alice', role='chatter', total_valid_sales=Decimal('5000')),
            TeamMemberFactory(full_name='Bob', role='chatter', total_valid_sales=Decimal('15000')),
            TeamMemberFactory(full_name='Cara', role='chatter', total_valid_sales=Decimal('1000')),
        ]
        self.rows = [compute_row(member) for member in roster]

    def names(self, rows):
        return [row.member.full_name for row in rows]

    def test_no_column_keeps_roster_order(self):
        assert self.names(sort_rows(self.rows, None, 'asc')) == ['Alice', 'Bob', 'Cara']

    def test_net_sales_desc(self):
        assert self.names(sort_rows(self.rows, 'net_sales', 'desc')) == ['Bob', 'Alice', 'Cara']

    def test_asc_and_desc_are_reverses_without_ties(self):
        ascending = sort_rows(self.rows, 'net_sales', 'asc')
        descending = sort_rows(self.rows, 'net_sales', 'desc')

        assert ascending == list(reversed(descending))

    def test_total_pay_asc(self):
        result = sort_rows(self.rows, 'total_pay', 'asc')

        totals = [row.total_pay for row in result]
        assert totals == sorted(totals)

    def test_does_not_mutate_input(self):
        original = list(self.rows)
        sort_rows(self.rows, 'net_sales', 'desc')

        assert self.rows == original

    def test_unknown_column_rejected(self):
        with pytest.raises(ValidationError):
            sort_rows(self.rows, 'full_name', 'asc')

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValidationError):
            sort_rows(self.rows, 'net_sales', 'sideways')


class TestNextSortState:

    def test_first_click_sorts_desc(self):
        assert next_sort_state(None, 'desc', 'net_sales') == ('net_sales', 'desc')

    def test_second_click_sorts_asc(self):
        assert next_sort_state('net_sales', 'desc', 'net_sales') == ('net_sales', 'asc')

    def test_third_click_clears_sort(self):
        assert next_sort_state('net_sales', 'asc', 'net_sales') == (None, 'desc')

    def test_other_column_starts_desc(self):
        assert next_sort_state('net_sales', 'asc', 'total_pay') == ('total_pay', 'desc')

    def test_unknown_column_rejected(self):
        with pytest.raises(ValidationError):
            next_sort_state(None, 'desc', 'email')


# =============================================================================
# aggregate / build_payroll_sheet
# =============================================================================

class TestAggregate:

    def setup_method(self):
        self.roster = [
            TeamMemberFactory(
                role='chatter',
                total_valid_sales=Decimal('12500'),
                bonuses=(BonusFactory(amount=Decimal('100')),),
            ),
            TeamMemberFactory(role='chatter', total_valid_sales=Decimal('2000')),
            TeamMemberFactory(
                role='admin',
                total_valid_sales=Decimal('0'),
                payroll_settings=PayrollSettingsFactory(base_salary=Decimal('1500')),
            ),
        ]

    def test_totals_equal_sum_of_rows(self):
        rows = [compute_row(member) for member in self.roster]

        totals = aggregate(rows)

        assert totals.total == sum(row.total_pay for row in rows)
        assert totals.base_salary == Decimal('450') + Decimal('250') + Decimal('1500')
        assert totals.commission == Decimal('250') + Decimal('40')
        assert totals.bonuses == Decimal('100')
        assert totals.net_sales == Decimal('11600')
        assert totals.gross_sales == Decimal('14500')
        assert totals.member_count == 3

    def test_empty_rows(self):
        totals = aggregate([])

        assert totals.total == Decimal('0')
        assert totals.member_count == 0

    @pytest.mark.parametrize('role', ['all', 'chatter', 'admin', 'manager'])
    @pytest.mark.parametrize('column', [None, 'net_sales', 'total_pay'])
    @pytest.mark.parametrize('direction', ['asc', 'desc'])
    def test_total_is_order_independent(self, role, column, direction):
        sheet = build_payroll_sheet(self.roster, role=role, sort_column=column, direction=direction)

        assert sheet.totals.total == sum((row.total_pay for row in sheet.rows), Decimal('0'))
        assert sheet.totals.member_count == len(sheet.rows)

    def test_sheet_only_totals_filtered_rows(self):
        sheet = build_payroll_sheet(self.roster, role='admin')

        assert sheet.totals.total == Decimal('1500')

    def test_sheet_to_dict_renders_money(self):
        data = build_payroll_sheet(self.roster[:1]).to_dict()

        row = data['rows'][0]
        assert row['net_sales'] == 10000.0
        assert row['base_salary'] == 450.0
        assert row['commission'] == 250.0
        assert row['bonus_total'] == 100.0
        assert row['bonus_count'] == 1
        assert row['total_pay'] == 800.0
        assert data['totals']['total'] == 800.0


# =============================================================================
# Attendance
# =============================================================================

class TestAttendance:

    def test_parse_time_to_hours(self):
        assert parse_time_to_hours('2:30') == Decimal('2.5')
        assert parse_time_to_hours('02:15') == Decimal('2.25')
        assert parse_time_to_hours('1:00:00') == Decimal('1')
        assert parse_time_to_hours(None) == Decimal('0')
        assert parse_time_to_hours('3') == Decimal('0')
        assert parse_time_to_hours('x:30') == Decimal('0.5')

    def test_summarize_attendance(self):
        records = [
            {'status': 'on_time'},
            {'status': 'late', 'clock_in_time': '0:30'},
            {'status': 'left_early', 'clock_out_time': '1:00'},
            {'status': 'late_and_left_early', 'clock_in_time': '0:15', 'clock_out_time': '0:45'},
            {'status': 'no_show'},
            {'status': 'day_off'},
            {'status': 'unknown'},
        ]

        summary = summarize_attendance(records)

        assert summary.days_worked == 4
        assert summary.late_count == 2
        assert summary.left_early_count == 2
        assert summary.no_show_days == 1
        assert summary.days_off == 1
        assert summary.missed_hours == Decimal('10.5')

    def test_attendance_never_affects_pay(self):
        present = TeamMemberFactory(role='chatter', total_valid_sales=Decimal('5000'))
        absent = TeamMemberFactory(
            role='chatter',
            total_valid_sales=Decimal('5000'),
            attendance=summarize_attendance([{'status': 'no_show'}] * 5),
        )

        assert compute_row(present).total_pay == compute_row(absent).total_pay


# =============================================================================
# Local state updates
# =============================================================================

class TestLocalStateUpdates:

    def setup_method(self):
        self.period = Period(month=1, year=2024)
        self.alice = TeamMemberFactory(full_name='Alice', role='chatter', total_valid_sales=Decimal('1000'))
        self.bob = TeamMemberFactory(full_name='Bob', role='chatter')
        self.roster = [self.alice, self.bob]

    def test_apply_payroll_settings_feeds_compute_row(self):
        settings = PayrollSettings(base_salary=Decimal('100'), commission_percentage=Decimal('50'))

        updated = apply_payroll_settings(self.roster, str(self.alice.id), settings)

        row = compute_row(updated[0])
        assert row.base_salary == Decimal('100')
        assert row.commission == Decimal('400')
        assert updated[1] is self.bob

    def test_merge_bonuses_in_period(self):
        bonus = BonusFactory(team_member_id=self.bob.id, bonus_date=date(2024, 1, 31))

        merged = merge_bonuses(self.roster, [bonus], self.period)

        assert merged[1].bonuses == (bonus,)
        assert merged[0].bonuses == ()
        assert self.bob.bonuses == ()

    def test_merge_bonuses_skips_other_periods(self):
        bonus = BonusFactory(team_member_id=self.bob.id, bonus_date=date(2024, 2, 1))

        merged = merge_bonuses(self.roster, [bonus], self.period)

        assert merged[1].bonuses == ()

    def test_remove_bonus(self):
        keep = BonusFactory(team_member_id=self.alice.id)
        drop = BonusFactory(team_member_id=self.alice.id)
        roster = merge_bonuses(self.roster, [keep, drop], self.period)

        result = remove_bonus(roster, drop.id)

        assert result[0].bonuses == (keep,)

    def test_remove_unknown_bonus_is_noop(self):
        result = remove_bonus(self.roster, uuid.uuid4())

        assert result == self.roster
