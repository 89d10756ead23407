"""Payroll deduction election model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from staffing_payroll.models.base import Base, TimestampMixin


class DeductionElection(Base, TimestampMixin):
    """An employee's election for a payroll deduction code.

    Either ``amount_cents`` (fixed) or ``percent_basis`` is set. Elections
    take effect from the payroll week starting at ``effective_week``.
    """

    __tablename__ = "payroll_deduction_election"

    deduction_election_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    code: Mapped[str] = mapped_column(String, nullable=False)
    amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    percent_basis: Mapped[float | None] = mapped_column(
        Numeric(7, 4, asdecimal=False), nullable=True
    )
    effective_week: Mapped[datetime] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
