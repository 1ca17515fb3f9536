"""
Core Constants

Centralized configuration values for the application.
"""

# Team member roles
TEAM_ROLES = ["owner", "admin", "manager", "chatter"]

# Payroll calculation defaults
PAYROLL = {
    # Share of gross sales kept after the platform fee (20% fee)
    "net_sales_rate": "0.8",
    # Chatter auto base salary tiers, keyed on net sales
    "chatter_threshold": "8000",
    "chatter_base_salary_high": "450",
    "chatter_base_salary_low": "250",
    "default_commission_percentage": "2.5",
}

# Sortable payroll sheet columns
PAYROLL_SORT_COLUMNS = ["net_sales", "total_pay"]

SORT_DIRECTIONS = ["asc", "desc"]

# Filter value meaning "every role"
ROLE_FILTER_ALL = "all"

# Chatter sale status counted toward payroll
VALID_SALE_STATUS = "valid"

# Hours counted as missed for a no-show
FULL_SHIFT_HOURS = 8

# Earliest year accepted for a payroll period
MIN_PAYROLL_YEAR = 2000
