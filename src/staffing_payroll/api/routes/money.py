"""Interactive money preview endpoint.

The result is a preview only: not an invoice and not a payroll snapshot.
Authoritative figures come from finalizing a payroll run.
"""

from fastapi import APIRouter, status

from staffing_payroll.api.schemas import (
    ErrorResponse,
    MoneyPreviewRequest,
    MoneyPreviewResponse,
)
from staffing_payroll.calculators import compute_preview_rows

router = APIRouter(prefix="/money", tags=["money"])


@router.post(
    "/preview",
    response_model=MoneyPreviewResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse}},
)
async def money_preview(payload: MoneyPreviewRequest) -> MoneyPreviewResponse:
    """Compute REG/OT/DT and shift differential rows for the given rates and hours."""
    result = compute_preview_rows(payload.to_rate_inputs())
    return MoneyPreviewResponse.model_validate(result)
