"""Type definitions for the payroll/billing preview calculation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class HourType(str, Enum):
    """Hour categories with a fixed payroll multiplier."""

    REG = "REG"
    OT = "OT"
    DT = "DT"


class Bucket(str, Enum):
    """Preview row labels, declared in the required row order."""

    REG = "REG"
    OT = "OT"
    DT = "DT"
    REG_SD = "REG (SD)"
    OT_SD = "OT (SD)"
    DT_SD = "DT (SD)"


@dataclass(frozen=True)
class RateInputs:
    """Inputs for one preview computation.

    Every field is required. The calculation does not validate values:
    negative or non-finite numbers propagate arithmetically into the result,
    so callers must reject bad input before building this object.
    """

    base_pay_rate: float
    base_bill_rate: float
    ot_bill_multiplier: float
    sd_pay_delta_rate: float
    sd_bill_delta_rate: float

    reg_hours: float
    ot_hours: float
    dt_hours: float
    reg_sd_hours: float
    ot_sd_hours: float
    dt_sd_hours: float


@dataclass(frozen=True)
class PreviewRow:
    """One bucket of a preview: hours, multipliers, rates and amounts."""

    bucket: Bucket
    hours: float
    pay_multiplier: float
    effective_pay_rate: float
    pay_amount: float
    bill_multiplier: float
    effective_bill_rate: float
    bill_amount: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket.value,
            "hours": self.hours,
            "pay_multiplier": self.pay_multiplier,
            "effective_pay_rate": self.effective_pay_rate,
            "pay_amount": self.pay_amount,
            "bill_multiplier": self.bill_multiplier,
            "effective_bill_rate": self.effective_bill_rate,
            "bill_amount": self.bill_amount,
        }


@dataclass(frozen=True)
class PreviewResult:
    """Six preview rows in fixed order plus re-rounded totals."""

    rows: tuple[PreviewRow, ...]
    total_hours: float
    total_pay: float
    total_bill: float

    @property
    def buckets(self) -> list[str]:
        return [row.bucket.value for row in self.rows]

    def row_for(self, bucket: Bucket | str) -> PreviewRow:
        """Return the row for a bucket label."""
        label = Bucket(bucket)
        for row in self.rows:
            if row.bucket is label:
                return row
        raise KeyError(label.value)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict, rows kept in their fixed order."""
        return {
            "rows": [row.to_dict() for row in self.rows],
            "total_hours": self.total_hours,
            "total_pay": self.total_pay,
            "total_bill": self.total_bill,
        }
