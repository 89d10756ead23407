"""Preview row builder for payroll cost and customer billing."""

from __future__ import annotations

from staffing_payroll.calculators.money_math import (
    BILLING_REG_MULTIPLIER,
    PAYROLL_MULTIPLIERS,
    compute_billing_dt_multiplier,
    compute_effective_rate,
    round2,
)
from staffing_payroll.calculators.types import (
    Bucket,
    HourType,
    PreviewResult,
    PreviewRow,
    RateInputs,
)

# (bucket, RateInputs hours field, hour type, is_sd) in the required row order
ROW_LAYOUT: tuple[tuple[Bucket, str, HourType, bool], ...] = (
    (Bucket.REG, "reg_hours", HourType.REG, False),
    (Bucket.OT, "ot_hours", HourType.OT, False),
    (Bucket.DT, "dt_hours", HourType.DT, False),
    (Bucket.REG_SD, "reg_sd_hours", HourType.REG, True),
    (Bucket.OT_SD, "ot_sd_hours", HourType.OT, True),
    (Bucket.DT_SD, "dt_sd_hours", HourType.DT, True),
)


def compute_preview_rows(inputs: RateInputs) -> PreviewResult:
    """Compute the six preview rows and their totals.

    Fixed row order (consumers index into it):
    1. REG
    2. OT
    3. DT
    4. REG (SD)
    5. OT (SD)
    6. DT (SD)

    Rates are rounded per row, amounts are rounded per row, and each total
    is the rounded sum of the already-rounded row values.
    """
    bill_multipliers = {
        HourType.REG: BILLING_REG_MULTIPLIER,
        HourType.OT: inputs.ot_bill_multiplier,
        HourType.DT: compute_billing_dt_multiplier(inputs.ot_bill_multiplier),
    }

    rows = tuple(
        _build_row(
            inputs,
            bucket=bucket,
            hours=getattr(inputs, hours_field),
            pay_multiplier=PAYROLL_MULTIPLIERS[hour_type],
            bill_multiplier=bill_multipliers[hour_type],
            is_sd=is_sd,
        )
        for bucket, hours_field, hour_type, is_sd in ROW_LAYOUT
    )

    # Left-to-right accumulation; builtin sum() compensates float error on 3.12+.
    total_hours = 0.0
    total_pay = 0.0
    total_bill = 0.0
    for row in rows:
        total_hours += row.hours
        total_pay += row.pay_amount
        total_bill += row.bill_amount

    return PreviewResult(
        rows=rows,
        total_hours=round2(total_hours),
        total_pay=round2(total_pay),
        total_bill=round2(total_bill),
    )


def _build_row(
    inputs: RateInputs,
    bucket: Bucket,
    hours: float,
    pay_multiplier: float,
    bill_multiplier: float,
    is_sd: bool,
) -> PreviewRow:
    effective_pay_rate = compute_effective_rate(
        inputs.base_pay_rate, inputs.sd_pay_delta_rate, pay_multiplier, is_sd
    )
    effective_bill_rate = compute_effective_rate(
        inputs.base_bill_rate, inputs.sd_bill_delta_rate, bill_multiplier, is_sd
    )

    return PreviewRow(
        bucket=bucket,
        hours=hours,
        pay_multiplier=pay_multiplier,
        effective_pay_rate=effective_pay_rate,
        pay_amount=round2(effective_pay_rate * hours),
        bill_multiplier=bill_multiplier,
        effective_bill_rate=effective_bill_rate,
        bill_amount=round2(effective_bill_rate * hours),
    )
