"""Rate cards and hour buckets feeding the preview calculation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Iterable

from staffing_payroll.calculators.types import RateInputs

if TYPE_CHECKING:
    from staffing_payroll.services.weekly_rollup import RollupLine

# Shift differential hours are identified by unit, regardless of earning code
SD_UNIT_BUCKETS: dict[str, str] = {
    "REG_SD": "reg_sd_hours",
    "OT_SD": "ot_sd_hours",
    "DT_SD": "dt_sd_hours",
}

HOURS_UNIT = "HOURS"
HOURS_CODE_BUCKETS: dict[str, str] = {
    "REG": "reg_hours",
    "OT": "ot_hours",
    "DT": "dt_hours",
}


@dataclass(frozen=True)
class RateCard:
    """Pay/bill rates for one order."""

    order_id: str
    base_pay_rate: float
    base_bill_rate: float
    ot_bill_multiplier: float
    sd_pay_delta_rate: float
    sd_bill_delta_rate: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HourBuckets:
    """Hours split into the six preview buckets."""

    reg_hours: float = 0.0
    ot_hours: float = 0.0
    dt_hours: float = 0.0
    reg_sd_hours: float = 0.0
    ot_sd_hours: float = 0.0
    dt_sd_hours: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.reg_hours
            + self.ot_hours
            + self.dt_hours
            + self.reg_sd_hours
            + self.ot_sd_hours
            + self.dt_sd_hours
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def hour_buckets_from_totals(totals: Iterable[RollupLine]) -> HourBuckets:
    """Sort rollup totals into buckets.

    Units REG_SD/OT_SD/DT_SD go to the SD buckets; HOURS lines with earning
    code REG/OT/DT go to the standard buckets. Anything else (per diem,
    bonus dollars, holiday) is not hour-rated and is skipped.
    """
    sums = {name: 0.0 for name in HourBuckets.__dataclass_fields__}

    for line in totals:
        field_name = SD_UNIT_BUCKETS.get(line.unit)
        if field_name is None and line.unit == HOURS_UNIT:
            field_name = HOURS_CODE_BUCKETS.get(line.earning_code)
        if field_name is None:
            continue
        sums[field_name] += line.quantity

    return HourBuckets(**sums)


def build_rate_inputs(card: RateCard, buckets: HourBuckets) -> RateInputs:
    """Combine an order's rate card with a worker's hours."""
    return RateInputs(
        base_pay_rate=card.base_pay_rate,
        base_bill_rate=card.base_bill_rate,
        ot_bill_multiplier=card.ot_bill_multiplier,
        sd_pay_delta_rate=card.sd_pay_delta_rate,
        sd_bill_delta_rate=card.sd_bill_delta_rate,
        reg_hours=buckets.reg_hours,
        ot_hours=buckets.ot_hours,
        dt_hours=buckets.dt_hours,
        reg_sd_hours=buckets.reg_sd_hours,
        ot_sd_hours=buckets.ot_sd_hours,
        dt_sd_hours=buckets.dt_sd_hours,
    )
