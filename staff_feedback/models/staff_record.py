"""
Staff record value object built from loosely typed staff table rows.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict

from ..config.settings import STAFF_COLUMNS


def to_display(value: Any) -> str:
    """
    Coerce a nullable, mixed-type column value to its display string.

    None becomes an empty string and integral floats lose their fractional
    part, so 40.0 is shown as "40".

    Args:
        value: Raw value read from the store

    Returns:
        str: Display string
    """
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class StaffRecord:
    """
    A staff member as shown on the evaluation form.

    Every attribute is a display string; coercion happens once in from_row.
    """
    registration_id: str
    name: str
    regional: str = ''
    role: str = ''
    location: str = ''
    unit: str = ''
    admission_date: str = ''
    national_id: str = ''
    monthly_hours: str = ''
    weekly_hours: str = ''
    tenure_months: str = ''
    total_workload: str = ''
    unjustified_absence_hours: str = ''
    unjustified_absence_pct: str = ''
    justified_absence_hours: str = ''
    justified_absence_pct: str = ''

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'StaffRecord':
        """
        Build a record from a staff table row.

        Missing columns are treated as null.

        Args:
            row: Mapping of staff table column names to raw values

        Returns:
            StaffRecord: Record with every field coerced to a string
        """
        values = {
            attribute: to_display(row.get(column))
            for attribute, column in STAFF_COLUMNS.items()
        }
        return cls(**values)

    @property
    def display_label(self) -> str:
        """Label used in the staff selector."""
        if self.role:
            return f"{self.name} - {self.role} ({self.registration_id})"
        return f"{self.name} ({self.registration_id})"

    def to_dict(self) -> Dict[str, str]:
        return {field.name: getattr(self, field.name) for field in fields(self)}
