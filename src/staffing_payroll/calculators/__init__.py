"""Payroll and billing money math."""

from staffing_payroll.calculators.money_math import (
    PAYROLL_MULTIPLIERS,
    compute_billing_dt_multiplier,
    compute_effective_rate,
    round2,
)
from staffing_payroll.calculators.preview_builder import compute_preview_rows
from staffing_payroll.calculators.types import (
    Bucket,
    HourType,
    PreviewResult,
    PreviewRow,
    RateInputs,
)

__all__ = [
    "PAYROLL_MULTIPLIERS",
    "Bucket",
    "HourType",
    "PreviewResult",
    "PreviewRow",
    "RateInputs",
    "compute_billing_dt_multiplier",
    "compute_effective_rate",
    "compute_preview_rows",
    "round2",
]
