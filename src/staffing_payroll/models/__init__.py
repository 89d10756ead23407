"""ORM models."""

from staffing_payroll.models.base import Base, TimestampMixin
from staffing_payroll.models.deductions import DeductionElection
from staffing_payroll.models.hours import (
    ENTRY_TYPE_OFFICIAL,
    ENTRY_TYPE_REFERENCE,
    HoursEntry,
    HoursEntryLine,
)
from staffing_payroll.models.payroll_run import ImmutableRecordError, PayrollRun

__all__ = [
    "Base",
    "TimestampMixin",
    "DeductionElection",
    "ENTRY_TYPE_OFFICIAL",
    "ENTRY_TYPE_REFERENCE",
    "HoursEntry",
    "HoursEntryLine",
    "ImmutableRecordError",
    "PayrollRun",
]
