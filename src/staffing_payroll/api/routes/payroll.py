"""Read-only weekly payroll rollup endpoints."""

import csv
import io
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import Response

from staffing_payroll.api.dependencies import AppSettings, DbSession
from staffing_payroll.api.schemas import (
    ErrorResponse,
    HourBucketsResponse,
    RollupPreviewGroup,
    WeeklyRollupPreviewResponse,
    WeeklyRollupResponse,
)
from staffing_payroll.calculators import round2
from staffing_payroll.services.deductions import (
    DeductionElectionService,
    calculate_deductions_preview,
)
from staffing_payroll.services.rate_cards import hour_buckets_from_totals
from staffing_payroll.services.weekly_rollup import (
    InvalidWeekEndError,
    WeeklyRollup,
    WeeklyRollupService,
)

router = APIRouter(prefix="/payroll", tags=["payroll"])

WeekEnd = Annotated[
    str, Query(description="YYYY-MM-DD local payroll date anchoring the week")
]

EXPORT_HEADER = [
    "week_start",
    "week_end",
    "worker_id",
    "order_id",
    "period_start",
    "period_end",
    "earning_code",
    "unit",
    "quantity",
]


async def _load_rollup(
    db: DbSession, settings: AppSettings, week_end: str, include_reference: bool
) -> WeeklyRollup:
    try:
        return await WeeklyRollupService(db, settings.payroll_timezone).get_weekly_rollup(
            week_end, include_reference=include_reference
        )
    except InvalidWeekEndError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get(
    "/weekly-rollup",
    response_model=WeeklyRollupResponse,
    responses={400: {"model": ErrorResponse}},
)
async def weekly_rollup(
    db: DbSession,
    settings: AppSettings,
    week_end: WeekEnd,
    include_reference: bool = False,
) -> WeeklyRollupResponse:
    """Weekly rollup of hours lines (Sunday-Saturday week containing week_end)."""
    rollup = await _load_rollup(db, settings, week_end, include_reference)
    return WeeklyRollupResponse.model_validate(rollup)


@router.get(
    "/weekly-rollup/preview",
    response_model=WeeklyRollupPreviewResponse,
    responses={400: {"model": ErrorResponse}},
)
async def weekly_rollup_preview(
    db: DbSession,
    settings: AppSettings,
    week_end: WeekEnd,
    include_reference: bool = False,
    include_deductions: bool = False,
) -> WeeklyRollupPreviewResponse:
    """Rollup with per-group hour buckets; deductions only when requested."""
    rollup = await _load_rollup(db, settings, week_end, include_reference)

    groups: list[RollupPreviewGroup] = []
    total_hours = 0.0
    for group in rollup.groups:
        buckets = hour_buckets_from_totals(group.totals)
        total_hours += buckets.total
        groups.append(
            RollupPreviewGroup(
                **group.to_dict(),
                hour_buckets=HourBucketsResponse.model_validate(buckets),
            )
        )

    response = WeeklyRollupPreviewResponse(
        week_start=rollup.week_start,
        week_end=rollup.week_end,
        timezone=rollup.timezone,
        include_reference=include_reference,
        include_deductions=include_deductions,
        groups=groups,
        total_hours=round2(total_hours),
    )

    if include_deductions:
        elections = await DeductionElectionService(db).get_elections_for_week(
            rollup.week_start, rollup.worker_ids
        )
        response.deduction_elections = [e.to_dict() for e in elections]
        response.deductions_preview = calculate_deductions_preview(elections).to_dict()

    return response


@router.get(
    "/weekly-rollup/export",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}},
        400: {"model": ErrorResponse},
    },
)
async def weekly_rollup_export(
    db: DbSession,
    settings: AppSettings,
    week_end: WeekEnd,
    include_reference: bool = False,
) -> Response:
    """CSV export of the weekly rollup, one row per group total."""
    rollup = await _load_rollup(db, settings, week_end, include_reference)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for group in rollup.groups:
        for line in group.totals:
            writer.writerow([
                rollup.week_start.isoformat(),
                rollup.week_end.isoformat(),
                group.worker_id,
                group.order_id,
                group.period_start.isoformat(),
                group.period_end.isoformat(),
                line.earning_code,
                line.unit,
                line.quantity,
            ])

    filename = f"payroll_weekly_rollup_{rollup.week_end.isoformat()}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
