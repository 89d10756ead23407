"""Payroll run finalization endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from staffing_payroll.api.dependencies import DbSession
from staffing_payroll.api.schemas import (
    ErrorResponse,
    FinalizeRequest,
    FinalizeResponse,
    PayrollRunResponse,
)
from staffing_payroll.services.payroll_run_service import (
    PayrollRunNotFoundError,
    PayrollRunService,
)
from staffing_payroll.services.weekly_rollup import InvalidWeekEndError

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


@router.post(
    "/finalize",
    response_model=FinalizeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def finalize_payroll_run(
    db: DbSession,
    payload: FinalizeRequest,
) -> FinalizeResponse:
    """Snapshot the week's rollup and money previews as an immutable run."""
    service = PayrollRunService(db)
    try:
        payroll_run = await service.finalize(
            payload.week_end,
            include_reference=payload.include_reference,
            include_deductions=payload.include_deductions,
            rate_cards=[card.to_rate_card() for card in payload.rate_cards],
            finalized_by_user_id=payload.finalized_by_user_id,
        )
    except InvalidWeekEndError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    await db.commit()

    return FinalizeResponse(
        payroll_run_id=payroll_run.payroll_run_id,
        week_start=payroll_run.week_start,
        week_end=payroll_run.week_end,
        timezone=payroll_run.timezone,
        snapshot_hash=payroll_run.snapshot_hash,
    )


@router.get(
    "/{payroll_run_id}",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(
    db: DbSession,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    """Get a finalized payroll run with its snapshot."""
    try:
        payroll_run = await PayrollRunService(db).get_payroll_run(payroll_run_id)
    except PayrollRunNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll run not found",
        )
    return PayrollRunResponse.model_validate(payroll_run)
