"""
Factory Boy Factories for the Payroll Backend

Import all factories here for easy access in tests.
"""
from tests.factories.core import (
    PayrollBonusModelFactory,
    PayrollSettingsModelFactory,
    TeamMemberModelFactory,
    TenantFactory,
)
from tests.factories.payroll import (
    AttendanceSummaryFactory,
    BonusFactory,
    PayrollSettingsFactory,
    TeamMemberFactory,
)

__all__ = [
    # Django models
    'TenantFactory',
    'TeamMemberModelFactory',
    'PayrollSettingsModelFactory',
    'PayrollBonusModelFactory',
    # Payroll records
    'TeamMemberFactory',
    'BonusFactory',
    'PayrollSettingsFactory',
    'AttendanceSummaryFactory',
]
