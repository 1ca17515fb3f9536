"""
Payroll Periods

A period is a (month, year) pair scoping which sales, bonuses and
attendance records are included in a payroll computation.
"""
import calendar
from dataclasses import dataclass
from datetime import date

from apps.core.constants import MIN_PAYROLL_YEAR
from apps.core.exceptions import ValidationError


@dataclass(frozen=True)
class Period:
    month: int
    year: int

    def __post_init__(self):
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise ValidationError('month must be between 1 and 12')
        if not isinstance(self.year, int) or not MIN_PAYROLL_YEAR <= self.year <= date.max.year:
            raise ValidationError(f'year must be between {MIN_PAYROLL_YEAR} and {date.max.year}')

    @classmethod
    def current(cls, today: date | None = None) -> 'Period':
        today = today or date.today()
        return cls(month=today.month, year=today.year)

    @classmethod
    def from_params(cls, month: str | None, year: str | None, today: date | None = None) -> 'Period':
        """
        Build a period from query string values.

        Missing values fall back to the current month/year.
        """
        current = cls.current(today)
        try:
            month_value = int(month) if month not in (None, '') else current.month
            year_value = int(year) if year not in (None, '') else current.year
        except (TypeError, ValueError) as err:
            raise ValidationError('month and year must be integers') from err
        return cls(month=month_value, year=year_value)

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end_date(self) -> date:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, last_day)

    @property
    def label(self) -> str:
        return f'{calendar.month_name[self.month]} {self.year}'

    def contains(self, value: date | str | None) -> bool:
        """Check whether a date (or ISO date string) falls inside this period."""
        if value is None:
            return False
        if isinstance(value, str):
            try:
                value = date.fromisoformat(value[:10])
            except ValueError:
                return False
        return self.start_date <= value <= self.end_date

    def to_dict(self) -> dict:
        return {
            'month': self.month,
            'year': self.year,
            'label': self.label,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
        }
