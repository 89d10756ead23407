"""Hours entry models read by the weekly rollup."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing_payroll.models.base import Base, TimestampMixin

ENTRY_TYPE_OFFICIAL = "OFFICIAL"
ENTRY_TYPE_REFERENCE = "REFERENCE"


class HoursEntry(Base, TimestampMixin):
    """Hours submitted for one worker on one order over a period."""

    __tablename__ = "hours_entry"

    hours_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    worker_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    order_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entry_type: Mapped[str] = mapped_column(
        String, nullable=False, default=ENTRY_TYPE_OFFICIAL
    )
    period_start: Mapped[datetime] = mapped_column(nullable=False)
    period_end: Mapped[datetime] = mapped_column(nullable=False, index=True)
    # Legacy entries carry only a total; the rollup books it as REG hours.
    total_hours: Mapped[float | None] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "entry_type IN ('OFFICIAL', 'REFERENCE')",
            name="hours_entry_type_check",
        ),
        CheckConstraint("period_end >= period_start", name="hours_entry_dates_check"),
    )

    # Relationships
    lines: Mapped[list[HoursEntryLine]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
    )


class HoursEntryLine(Base):
    """Quantity booked against an earning code and unit.

    Shift differential hours are recorded with unit REG_SD, OT_SD or DT_SD.
    """

    __tablename__ = "hours_entry_line"

    hours_entry_line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    hours_entry_id: Mapped[UUID] = mapped_column(
        ForeignKey("hours_entry.hours_entry_id", ondelete="CASCADE"),
        nullable=False,
    )
    earning_code: Mapped[str] = mapped_column(String, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False, default="HOURS")
    quantity: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0
    )

    # Relationships
    entry: Mapped[HoursEntry] = relationship(back_populates="lines")
