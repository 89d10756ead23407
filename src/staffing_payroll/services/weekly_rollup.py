"""Weekly rollup of hours entries into per-worker totals."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffing_payroll.config import get_settings
from staffing_payroll.models import ENTRY_TYPE_OFFICIAL, ENTRY_TYPE_REFERENCE, HoursEntry
from staffing_payroll.services.rate_cards import HOURS_UNIT

logger = logging.getLogger(__name__)

WEEK_END_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


class InvalidWeekEndError(ValueError):
    """Raised when a week end is not a valid YYYY-MM-DD date."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid week end {value!r}: {reason}")


def parse_week_end(value: date | str) -> date:
    """Parse a YYYY-MM-DD week end (local payroll date)."""
    if isinstance(value, date):
        return value

    match = WEEK_END_PATTERN.fullmatch(value or "")
    if not match:
        raise InvalidWeekEndError(value, "expected YYYY-MM-DD")

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidWeekEndError(value, str(e)) from e


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class WeekWindow:
    """Sunday-Saturday payroll week in a local timezone.

    ``start_utc`` is local Sunday midnight, ``end_utc`` the following
    Sunday midnight (exclusive), both converted to UTC.
    """

    week_start: date
    week_end: date
    timezone: str
    start_utc: datetime
    end_utc: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start_utc <= as_utc(instant) < self.end_utc


def resolve_week_window(week_end: date | str, tz_name: str) -> WeekWindow:
    """Resolve the Sunday-Saturday week containing ``week_end``."""
    anchor = parse_week_end(week_end)
    tz = ZoneInfo(tz_name)

    # date.weekday(): Monday=0 .. Sunday=6
    sunday = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    next_sunday = sunday + timedelta(days=7)

    return WeekWindow(
        week_start=sunday,
        week_end=sunday + timedelta(days=6),
        timezone=tz_name,
        start_utc=datetime.combine(sunday, time.min, tzinfo=tz).astimezone(timezone.utc),
        end_utc=datetime.combine(next_sunday, time.min, tzinfo=tz).astimezone(timezone.utc),
    )


@dataclass(frozen=True)
class RollupLine:
    """Summed quantity for one earning code and unit."""

    earning_code: str
    unit: str
    quantity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "earning_code": self.earning_code,
            "unit": self.unit,
            "quantity": self.quantity,
        }


@dataclass
class RollupGroup:
    """Totals for one worker, order and period."""

    worker_id: str
    order_id: str
    period_start: datetime
    period_end: datetime
    totals: list[RollupLine] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "order_id": self.order_id,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "totals": [line.to_dict() for line in self.totals],
        }


@dataclass
class WeeklyRollup:
    """All groups for a payroll week."""

    week_start: date
    week_end: date
    timezone: str
    include_reference: bool
    groups: list[RollupGroup] = field(default_factory=list)

    @property
    def worker_ids(self) -> list[str]:
        """Distinct worker IDs in first-seen order."""
        return list(dict.fromkeys(g.worker_id for g in self.groups))

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "timezone": self.timezone,
            "include_reference": self.include_reference,
            "groups": [g.to_dict() for g in self.groups],
        }


def rollup_entries(
    entries: list[HoursEntry],
    window: WeekWindow,
    include_reference: bool,
) -> WeeklyRollup:
    """Group entries by (worker, order, period) and sum per (code, unit).

    Entries without lines fall back to ``total_hours`` as REG/HOURS.
    Group order follows the entry order; totals are sorted by code and unit.
    """
    grouped: dict[tuple[str, str, datetime, datetime], dict[tuple[str, str], float]] = {}

    for entry in entries:
        key = (
            entry.worker_id,
            entry.order_id,
            as_utc(entry.period_start),
            as_utc(entry.period_end),
        )
        totals = grouped.setdefault(key, {})

        if entry.lines:
            for line in entry.lines:
                line_key = (line.earning_code, line.unit)
                totals[line_key] = totals.get(line_key, 0.0) + float(line.quantity)
        elif entry.total_hours is not None:
            line_key = ("REG", HOURS_UNIT)
            totals[line_key] = totals.get(line_key, 0.0) + float(entry.total_hours)

    groups = [
        RollupGroup(
            worker_id=worker_id,
            order_id=order_id,
            period_start=period_start,
            period_end=period_end,
            totals=[
                RollupLine(earning_code=code, unit=unit, quantity=quantity)
                for (code, unit), quantity in sorted(totals.items())
            ],
        )
        for (worker_id, order_id, period_start, period_end), totals in grouped.items()
    ]

    return WeeklyRollup(
        week_start=window.week_start,
        week_end=window.week_end,
        timezone=window.timezone,
        include_reference=include_reference,
        groups=groups,
    )


class WeeklyRollupService:
    """Builds read-only weekly rollups of hours entries.

    Week rule: the Sunday-Saturday week (payroll timezone) containing the
    requested week end. An entry belongs to the week its ``period_end``
    falls in. Reference hours are excluded unless requested.
    """

    def __init__(self, session: AsyncSession, tz_name: str | None = None):
        self.session = session
        self.tz_name = tz_name or get_settings().payroll_timezone

    async def get_weekly_rollup(
        self,
        week_end: date | str,
        include_reference: bool = False,
    ) -> WeeklyRollup:
        """Build the rollup for the week containing ``week_end``.

        Raises:
            InvalidWeekEndError: If ``week_end`` is not YYYY-MM-DD
        """
        window = resolve_week_window(week_end, self.tz_name)
        entry_types = [ENTRY_TYPE_OFFICIAL]
        if include_reference:
            entry_types.append(ENTRY_TYPE_REFERENCE)

        entries = await self._get_entries(window, entry_types)
        rollup = rollup_entries(entries, window, include_reference)

        logger.info(
            "Weekly rollup %s..%s (%s): %d entries, %d groups",
            window.week_start,
            window.week_end,
            window.timezone,
            len(entries),
            len(rollup.groups),
        )
        return rollup

    async def _get_entries(
        self, window: WeekWindow, entry_types: list[str]
    ) -> list[HoursEntry]:
        """Get entries whose period ends inside the window."""
        result = await self.session.execute(
            select(HoursEntry)
            .where(
                HoursEntry.entry_type.in_(entry_types),
                HoursEntry.period_end >= window.start_utc,
                HoursEntry.period_end < window.end_utc,
            )
            .options(selectinload(HoursEntry.lines))
            .order_by(
                HoursEntry.worker_id,
                HoursEntry.order_id,
                HoursEntry.period_start,
                HoursEntry.period_end,
            )
        )
        return list(result.scalars().all())
