"""
Core Models for the Payroll Backend

These are UNMANAGED models that map to existing Supabase PostgreSQL tables.
They do NOT create migrations - Django reads from existing tables.
"""
import uuid

from django.db import models

from .constants import TEAM_ROLES


class Tenant(models.Model):
    """
    An agency using the back-office.
    Maps to: public.tenants
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        managed = False  # Don't create migrations
        db_table = 'tenants'

    def __str__(self):
        return self.name


class TeamMember(models.Model):
    """
    A member of an agency's team.
    Maps to: public.team_members
    """
    ROLE_CHOICES = [(role, role.title()) for role in TEAM_ROLES]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    auth_user_id = models.UUIDField(unique=True, null=True, blank=True)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name='team_members'
    )
    full_name = models.CharField(max_length=255)
    email = models.CharField(max_length=255, null=True, blank=True)
    role = models.CharField(max_length=50, choices=ROLE_CHOICES, default='chatter')
    shift = models.CharField(max_length=50, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        managed = False
        db_table = 'team_members'

    def __str__(self):
        return f"{self.full_name} ({self.role})"


class PayrollSettings(models.Model):
    """
    Per-member pay configuration; persists across periods until overwritten.
    Maps to: public.payroll_settings
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    team_member = models.OneToOneField(
        TeamMember,
        on_delete=models.CASCADE,
        related_name='payroll_settings'
    )
    # NULL or 0 means "auto-calculate"
    base_salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    commission_percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        managed = False
        db_table = 'payroll_settings'
        verbose_name_plural = 'Payroll settings'

    def __str__(self):
        return f"Payroll settings for {self.team_member_id}"


class PayrollBonus(models.Model):
    """
    A one-off payment added by an admin.
    Maps to: public.payroll_bonuses
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    team_member = models.ForeignKey(
        TeamMember,
        on_delete=models.CASCADE,
        related_name='bonuses'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.TextField()
    bonus_date = models.DateField()
    created_by = models.ForeignKey(
        TeamMember,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        db_column='created_by',
        related_name='bonuses_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        managed = False
        db_table = 'payroll_bonuses'
        ordering = ['bonus_date']

    def __str__(self):
        return f"{self.amount} on {self.bonus_date}: {self.reason}"


class ChatterSale(models.Model):
    """
    A sale logged by a chatter; only 'valid' sales count toward payroll.
    Maps to: public.chatter_sales
    """
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('valid', 'Valid'),
        ('invalid', 'Invalid'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    chatter = models.ForeignKey(
        TeamMember,
        on_delete=models.CASCADE,
        related_name='sales'
    )
    gross_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    sale_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        managed = False
        db_table = 'chatter_sales'

    def __str__(self):
        return f"{self.gross_amount} ({self.status}) on {self.sale_date}"


class AttendanceRecord(models.Model):
    """
    One day of attendance for a team member.
    Maps to: public.attendance_records

    clock_in_time / clock_out_time hold the hours missed as 'H:MM' text.
    """
    STATUS_CHOICES = [
        ('on_time', 'On Time'),
        ('late', 'Late'),
        ('left_early', 'Left Early'),
        ('late_and_left_early', 'Late and Left Early'),
        ('no_show', 'No Show'),
        ('day_off', 'Day Off'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    team_member = models.ForeignKey(
        TeamMember,
        on_delete=models.CASCADE,
        related_name='attendance_records'
    )
    date = models.DateField()
    status = models.CharField(max_length=30, choices=STATUS_CHOICES)
    clock_in_time = models.CharField(max_length=10, null=True, blank=True)
    clock_out_time = models.CharField(max_length=10, null=True, blank=True)

    class Meta:
        managed = False
        db_table = 'attendance_records'

    def __str__(self):
        return f"{self.team_member_id} {self.date}: {self.status}"
