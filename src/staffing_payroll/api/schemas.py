"""Pydantic schemas for API request/response models.

Request schemas are the validation boundary: the preview calculation
itself accepts any numbers, so non-negative, finite rates and hours are
enforced here and rejected (422) before any calculation runs. The upper
bounds keep every row amount finite.
"""

from datetime import date, datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from staffing_payroll.calculators.types import Bucket, RateInputs
from staffing_payroll.services.rate_cards import RateCard

PREVIEW_NOTICE = "PREVIEW ONLY - NOT INVOICE - NOT SNAPSHOT"

MAX_RATE = 1_000_000.0
MAX_HOURS = 10_000.0
MAX_MULTIPLIER = 100.0

NonNegativeRate = Annotated[float, Field(ge=0, le=MAX_RATE)]
NonNegativeHours = Annotated[float, Field(ge=0, le=MAX_HOURS)]
PositiveMultiplier = Annotated[float, Field(gt=0, le=MAX_MULTIPLIER)]


class ErrorResponse(BaseModel):
    """Error payload."""

    detail: str
    code: str | None = None


# ============================================================================
# Money preview schemas
# ============================================================================


class MoneyPreviewRequest(BaseModel):
    """Rates and hours for an interactive preview. Every field is required."""

    model_config = ConfigDict(allow_inf_nan=False, extra="forbid")

    base_pay_rate: NonNegativeRate
    base_bill_rate: NonNegativeRate
    ot_bill_multiplier: PositiveMultiplier
    sd_pay_delta_rate: NonNegativeRate
    sd_bill_delta_rate: NonNegativeRate

    reg_hours: NonNegativeHours
    ot_hours: NonNegativeHours
    dt_hours: NonNegativeHours
    reg_sd_hours: NonNegativeHours
    ot_sd_hours: NonNegativeHours
    dt_sd_hours: NonNegativeHours

    def to_rate_inputs(self) -> RateInputs:
        return RateInputs(**self.model_dump())


class PreviewRowResponse(BaseModel):
    """One preview row."""

    model_config = ConfigDict(from_attributes=True)

    bucket: Bucket
    hours: float
    pay_multiplier: float
    effective_pay_rate: float
    pay_amount: float
    bill_multiplier: float
    effective_bill_rate: float
    bill_amount: float


class MoneyPreviewResponse(BaseModel):
    """Preview rows and totals, labelled as non-authoritative."""

    model_config = ConfigDict(from_attributes=True)

    rows: list[PreviewRowResponse]
    total_hours: float
    total_pay: float
    total_bill: float
    notice: str = PREVIEW_NOTICE


# ============================================================================
# Weekly rollup schemas
# ============================================================================


class RollupLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    earning_code: str
    unit: str
    quantity: float


class RollupGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: str
    order_id: str
    period_start: datetime
    period_end: datetime
    totals: list[RollupLineResponse]


class WeeklyRollupResponse(BaseModel):
    """Read-only weekly rollup of hours lines."""

    model_config = ConfigDict(from_attributes=True)

    week_start: date
    week_end: date
    timezone: str
    include_reference: bool
    groups: list[RollupGroupResponse]


class HourBucketsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reg_hours: float
    ot_hours: float
    dt_hours: float
    reg_sd_hours: float
    ot_sd_hours: float
    dt_sd_hours: float


class RollupPreviewGroup(RollupGroupResponse):
    hour_buckets: HourBucketsResponse


class WeeklyRollupPreviewResponse(BaseModel):
    """Rollup with engine hour buckets and optional deductions preview."""

    week_start: date
    week_end: date
    timezone: str
    include_reference: bool
    include_deductions: bool
    groups: list[RollupPreviewGroup]
    total_hours: float
    deduction_elections: list[dict[str, Any]] | None = None
    deductions_preview: dict[str, Any] | None = None


# ============================================================================
# Payroll run schemas
# ============================================================================


class RateCardSchema(BaseModel):
    """Rates for one order, used when finalizing a week."""

    model_config = ConfigDict(allow_inf_nan=False, extra="forbid")

    order_id: str = Field(min_length=1)
    base_pay_rate: NonNegativeRate
    base_bill_rate: NonNegativeRate
    ot_bill_multiplier: PositiveMultiplier
    sd_pay_delta_rate: NonNegativeRate
    sd_bill_delta_rate: NonNegativeRate

    def to_rate_card(self) -> RateCard:
        return RateCard(**self.model_dump())


class FinalizeRequest(BaseModel):
    """Request to finalize a payroll week."""

    week_end: str = Field(description="YYYY-MM-DD in the payroll timezone")
    include_reference: bool = False
    include_deductions: bool = False
    rate_cards: list[RateCardSchema] = Field(default_factory=list)
    finalized_by_user_id: str | None = None


class FinalizeResponse(BaseModel):
    """Result of a finalization."""

    payroll_run_id: UUID
    week_start: date
    week_end: date
    timezone: str
    snapshot_hash: str


class PayrollRunResponse(BaseModel):
    """Stored payroll run with its snapshot."""

    model_config = ConfigDict(from_attributes=True)

    payroll_run_id: UUID
    week_start: date
    week_end: date
    timezone: str
    snapshot_json: dict[str, Any]
    snapshot_hash: str
    engine_version: str
    include_deductions: bool
    include_reference: bool
    finalized_by_user_id: str | None = None
    created_at: datetime
