"""Finalized payroll run model."""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, String, event
from sqlalchemy.orm import Mapped, ORMExecuteState, Session, mapped_column

from staffing_payroll.models.base import Base, JSONDocument, TimestampMixin


class ImmutableRecordError(Exception):
    """Raised when a finalized payroll run is modified."""

    def __init__(self, payroll_run_id: UUID | None = None):
        self.payroll_run_id = payroll_run_id
        if payroll_run_id is None:
            super().__init__("Payroll runs are immutable once finalized")
        else:
            super().__init__(f"Payroll run {payroll_run_id} is immutable once finalized")


class PayrollRun(Base, TimestampMixin):
    """Immutable audit record of a finalized payroll week.

    ``snapshot_json`` holds the rollup and money previews exactly as they
    were computed at finalization; ``snapshot_hash`` is the sha256 of its
    canonical JSON form.

    Updates are rejected both through the unit of work and as ORM bulk
    ``update(PayrollRun)`` statements. Core statements against the bare
    table bypass the ORM and are not checked.
    """

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    week_end: Mapped[date] = mapped_column(Date, nullable=False)
    timezone: Mapped[str] = mapped_column(String, nullable=False)
    snapshot_json: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    snapshot_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    engine_version: Mapped[str] = mapped_column(String, nullable=False)
    include_deductions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    include_reference: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    finalized_by_user_id: Mapped[str | None] = mapped_column(String, nullable=True)


@event.listens_for(PayrollRun, "before_update")
def _reject_payroll_run_update(mapper: Any, connection: Any, target: PayrollRun) -> None:
    raise ImmutableRecordError(target.payroll_run_id)


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_payroll_run_update(orm_execute_state: ORMExecuteState) -> None:
    # Bulk update(PayrollRun) statements skip the mapper events above.
    mapper = orm_execute_state.bind_mapper
    if orm_execute_state.is_update and mapper is not None and mapper.class_ is PayrollRun:
        raise ImmutableRecordError()
