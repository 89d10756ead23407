"""Payroll services: weekly rollup, deductions preview, payroll runs."""

from staffing_payroll.services.deductions import (
    DeductionElectionService,
    calculate_deductions_preview,
)
from staffing_payroll.services.payroll_run_service import (
    PayrollRunNotFoundError,
    PayrollRunService,
)
from staffing_payroll.services.rate_cards import (
    HourBuckets,
    RateCard,
    build_rate_inputs,
    hour_buckets_from_totals,
)
from staffing_payroll.services.weekly_rollup import (
    InvalidWeekEndError,
    WeeklyRollupService,
    resolve_week_window,
)

__all__ = [
    "DeductionElectionService",
    "HourBuckets",
    "InvalidWeekEndError",
    "PayrollRunNotFoundError",
    "PayrollRunService",
    "RateCard",
    "WeeklyRollupService",
    "build_rate_inputs",
    "calculate_deductions_preview",
    "hour_buckets_from_totals",
    "resolve_week_window",
]
