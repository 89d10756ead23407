"""Money rounding, multiplier table and effective rate calculation.

Locked rules:
- Payroll multipliers: REG=1.0, OT=1.5, DT=2.0
- Billing multipliers: REG=1.0, OT=ot_bill_multiplier (caller supplied),
  DT=round2(OT x 4/3)
- Shift differential (SD) is an additive delta on the base rate, applied
  only to SD hours, before the hour-type multiplier
- SD rows use the same multipliers as their non-SD counterparts

All functions are pure. Amounts are binary floats rounded with ``round2``;
the results are compared bit-for-bit against stored snapshots, so do not
swap in Decimal arithmetic here.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping

from staffing_payroll.calculators.types import HourType

PAYROLL_MULTIPLIERS: Mapping[HourType, float] = MappingProxyType(
    {
        HourType.REG: 1.0,
        HourType.OT: 1.5,
        HourType.DT: 2.0,
    }
)

BILLING_REG_MULTIPLIER = 1.0


def round2(n: float) -> float:
    """Round to cents on the value scaled by 100.

    Exact halves go up: 0.125 -> 0.13 and -0.125 -> -0.12. NaN and
    infinities are returned unchanged, and a finite value whose scaled
    form overflows comes back as a signed infinity.
    """
    scaled = n * 100
    if not math.isfinite(scaled):
        return scaled / 100
    whole = math.floor(scaled)
    if scaled - whole >= 0.5:
        whole += 1
    if whole == 0:
        return math.copysign(0.0, n)
    return whole / 100


def compute_billing_dt_multiplier(ot_bill_multiplier: float) -> float:
    """Billing DT multiplier, always derived as round2(OT x 4/3)."""
    return round2((ot_bill_multiplier * 4) / 3)


def compute_effective_rate(
    base_rate: float,
    sd_delta_rate: float,
    multiplier: float,
    is_sd: bool,
) -> float:
    """Compute a per-hour rate rounded to cents.

    - Non-SD: base_rate x multiplier
    - SD: (base_rate + sd_delta_rate) x multiplier
    """
    if is_sd:
        return round2((base_rate + sd_delta_rate) * multiplier)
    return round2(base_rate * multiplier)
