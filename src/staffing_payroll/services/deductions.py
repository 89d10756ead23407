"""Preview-only deduction elections and amounts.

Nothing here posts, withholds or moves money; results are embedded in
rollup previews and payroll run snapshots for review.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.models import DeductionElection
from staffing_payroll.services.weekly_rollup import as_utc

METHOD_FIXED_AMOUNT = "FIXED_AMOUNT"
METHOD_PERCENT = "PERCENT"
PERCENT_BASIS_WARNING = "PERCENT_BASIS_NOT_CALCULATED"

DEDUCTION_LABELS: dict[str, str] = {
    "ETV": "Empower The Veterans Foundation",
}


def label_for(code: str) -> str:
    return DEDUCTION_LABELS.get(code, code)


@dataclass(frozen=True)
class ElectionSnapshot:
    """Latest active election for one employee and code."""

    employee_id: str
    code: str
    amount_cents: int | float | None
    percent_basis: float | None
    effective_week: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "code": self.code,
            "amount_cents": self.amount_cents,
            "percent_basis": self.percent_basis,
            "effective_week": self.effective_week.isoformat(),
        }


@dataclass(frozen=True)
class DeductionLine:
    code: str
    label: str
    method: str
    amount_cents: int
    currency: str = "USD"
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "label": self.label,
            "method": self.method,
            "amount_cents": self.amount_cents,
            "currency": self.currency,
            "warning": self.warning,
        }


@dataclass
class EmployeeDeductions:
    employee_id: str
    deductions: list[DeductionLine] = field(default_factory=list)
    total_cents: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "deductions": [d.to_dict() for d in self.deductions],
            "total_cents": self.total_cents,
        }


@dataclass
class DeductionsPreview:
    by_employee: list[EmployeeDeductions] = field(default_factory=list)
    total_cents: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "by_employee": [e.to_dict() for e in self.by_employee],
            "total_cents": self.total_cents,
        }


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def calculate_deductions_preview(
    elections: Iterable[ElectionSnapshot],
) -> DeductionsPreview:
    """Calculate deterministic deduction amounts from elections.

    - Fixed amounts are truncated to whole cents.
    - Percent elections have no wage base yet: they are listed with
      ``amount_cents=0`` and a warning, and do not count toward totals.
    - Elections with neither value are skipped.
    - Output is sorted by employee ID, then by code.
    """
    by_employee: dict[str, list[ElectionSnapshot]] = {}
    for election in elections:
        if not election.employee_id or not election.code:
            continue
        by_employee.setdefault(election.employee_id, []).append(election)

    preview = DeductionsPreview()

    for employee_id in sorted(by_employee):
        employee = EmployeeDeductions(employee_id=employee_id)

        for election in sorted(by_employee[employee_id], key=lambda e: e.code):
            if _is_finite_number(election.amount_cents):
                amount = math.trunc(election.amount_cents)
                employee.deductions.append(
                    DeductionLine(
                        code=election.code,
                        label=label_for(election.code),
                        method=METHOD_FIXED_AMOUNT,
                        amount_cents=amount,
                    )
                )
                employee.total_cents += amount
            elif _is_finite_number(election.percent_basis):
                employee.deductions.append(
                    DeductionLine(
                        code=election.code,
                        label=label_for(election.code),
                        method=METHOD_PERCENT,
                        amount_cents=0,
                        warning=PERCENT_BASIS_WARNING,
                    )
                )

        preview.total_cents += employee.total_cents
        preview.by_employee.append(employee)

    return preview


class DeductionElectionService:
    """Reads deduction elections effective for a payroll week."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_elections_for_week(
        self,
        week_start: date,
        employee_ids: list[str],
    ) -> list[ElectionSnapshot]:
        """Latest active election per (employee, code) effective by ``week_start``."""
        if not employee_ids:
            return []

        anchor = datetime.combine(week_start, time.max, tzinfo=timezone.utc)
        result = await self.session.execute(
            select(DeductionElection)
            .where(
                DeductionElection.employee_id.in_(employee_ids),
                DeductionElection.is_active.is_(True),
                DeductionElection.effective_week <= anchor,
            )
            .order_by(
                DeductionElection.effective_week.desc(),
                DeductionElection.created_at.desc(),
            )
        )

        seen: set[tuple[str, str]] = set()
        latest: list[ElectionSnapshot] = []
        for row in result.scalars().all():
            key = (row.employee_id, row.code)
            if key in seen:
                continue
            seen.add(key)
            latest.append(
                ElectionSnapshot(
                    employee_id=row.employee_id,
                    code=row.code,
                    amount_cents=row.amount_cents,
                    percent_basis=row.percent_basis,
                    effective_week=as_utc(row.effective_week),
                )
            )
        return latest
