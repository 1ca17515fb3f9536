"""
Model Unit Tests

The tables are unmanaged, so models are only built in memory.
"""
import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.core.models import AttendanceRecord, ChatterSale, PayrollBonus, PayrollSettings, TeamMember
from tests.factories import (
    PayrollBonusModelFactory,
    PayrollSettingsModelFactory,
    TeamMemberModelFactory,
    TenantFactory,
)


class TenantModelTests(SimpleTestCase):
    """Tests for the Tenant model."""

    def test_tenant_str(self):
        tenant = TenantFactory.build(name='Velvet Agency')
        self.assertEqual(str(tenant), 'Velvet Agency')

    def test_slug_derived_from_name(self):
        tenant = TenantFactory.build(name='Velvet Agency')
        self.assertEqual(tenant.slug, 'velvet-agency')


class TeamMemberModelTests(SimpleTestCase):
    """Tests for the TeamMember model."""

    def test_team_member_str(self):
        member = TeamMemberModelFactory.build(full_name='Jane Roe', role='chatter')
        self.assertEqual(str(member), 'Jane Roe (chatter)')

    def test_admin_trait(self):
        member = TeamMemberModelFactory.build(admin=True)
        self.assertEqual(member.role, 'admin')

    def test_table_is_unmanaged(self):
        self.assertFalse(TeamMember._meta.managed)
        self.assertEqual(TeamMember._meta.db_table, 'team_members')


class PayrollModelTests(SimpleTestCase):
    """Tests for payroll settings and bonuses."""

    def test_settings_str(self):
        settings = PayrollSettingsModelFactory.build()
        self.assertEqual(str(settings), f'Payroll settings for {settings.team_member.id}')

    def test_settings_default_to_auto_base_salary(self):
        settings = PayrollSettings(id=uuid.uuid4())
        self.assertIsNone(settings.base_salary)
        self.assertIsNone(settings.commission_percentage)

    def test_bonus_str(self):
        bonus = PayrollBonusModelFactory.build(
            amount=Decimal('100.00'),
            bonus_date=date(2024, 1, 15),
            reason='Top seller',
        )
        self.assertEqual(str(bonus), '100.00 on 2024-01-15: Top seller')

    def test_bonus_creator_shares_tenant(self):
        bonus = PayrollBonusModelFactory.build()
        self.assertEqual(bonus.created_by.tenant, bonus.team_member.tenant)
        self.assertEqual(bonus.created_by.role, 'admin')

    def test_bonus_created_by_column(self):
        field = PayrollBonus._meta.get_field('created_by')
        self.assertEqual(field.db_column, 'created_by')


class SalesAndAttendanceModelTests(SimpleTestCase):
    """Tests for the chatter sales and attendance models."""

    def test_chatter_sale_str(self):
        sale = ChatterSale(
            id=uuid.uuid4(),
            gross_amount=Decimal('250.00'),
            status='valid',
            sale_date=date(2024, 1, 3),
        )
        self.assertEqual(str(sale), '250.00 (valid) on 2024-01-03')

    def test_attendance_record_str(self):
        member = TeamMemberModelFactory.build()
        record = AttendanceRecord(
            id=uuid.uuid4(),
            team_member=member,
            date=date(2024, 1, 3),
            status='late',
            clock_in_time='0:30',
        )
        self.assertEqual(str(record), f'{member.id} 2024-01-03: late')
