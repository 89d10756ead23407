"""Pytest fixtures for staffing payroll tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from staffing_payroll.calculators import RateInputs
from staffing_payroll.database import create_schema
from staffing_payroll.models import (
    DeductionElection,
    HoursEntry,
    HoursEntryLine,
)
from staffing_payroll.services.rate_cards import RateCard

# Use in-memory SQLite for tests (with async support).
# StaticPool keeps every session on the one in-memory database.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Payroll week Sunday 2026-01-04 .. Saturday 2026-01-10 (America/Chicago)
WEEK_END = "2026-01-10"


def utc(*args: int) -> datetime:
    """Build a UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def scenario_inputs() -> RateInputs:
    """Reference scenario: every bucket populated, SD deltas set."""
    return RateInputs(
        base_pay_rate=25.00,
        base_bill_rate=45.00,
        ot_bill_multiplier=1.5,
        sd_pay_delta_rate=3.00,
        sd_bill_delta_rate=5.00,
        reg_hours=40,
        ot_hours=8,
        dt_hours=4,
        reg_sd_hours=16,
        ot_sd_hours=4,
        dt_sd_hours=2,
    )


@pytest.fixture
def rate_card() -> RateCard:
    """Rate card for order ORD-1."""
    return RateCard(
        order_id="ORD-1",
        base_pay_rate=25.00,
        base_bill_rate=45.00,
        ot_bill_multiplier=1.5,
        sd_pay_delta_rate=3.00,
        sd_bill_delta_rate=5.00,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def seeded_hours(session: AsyncSession) -> list[HoursEntry]:
    """Hours for the week of 2026-01-04 plus entries outside it.

    W-1 on ORD-1: two OFFICIAL entries sharing a period (summed), one
    REFERENCE entry, and a legacy entry with only total_hours.
    W-2 on ORD-2: SD hours and a non-hour line.
    Also one OFFICIAL entry in the previous week.
    """
    period_start = utc(2026, 1, 4, 6)
    period_end = utc(2026, 1, 10, 18)

    entries = [
        HoursEntry(
            worker_id="W-1",
            order_id="ORD-1",
            period_start=period_start,
            period_end=period_end,
            lines=[
                HoursEntryLine(earning_code="REG", unit="HOURS", quantity=32),
                HoursEntryLine(earning_code="OT", unit="HOURS", quantity=6),
            ],
        ),
        HoursEntry(
            worker_id="W-1",
            order_id="ORD-1",
            period_start=period_start,
            period_end=period_end,
            lines=[
                HoursEntryLine(earning_code="REG", unit="HOURS", quantity=8),
                HoursEntryLine(earning_code="OT", unit="HOURS", quantity=2),
                HoursEntryLine(earning_code="DT", unit="HOURS", quantity=4),
            ],
        ),
        HoursEntry(
            worker_id="W-1",
            order_id="ORD-1",
            entry_type="REFERENCE",
            period_start=period_start,
            period_end=period_end,
            lines=[HoursEntryLine(earning_code="REG", unit="HOURS", quantity=99)],
        ),
        HoursEntry(
            worker_id="W-1",
            order_id="ORD-LEGACY",
            period_start=period_start,
            period_end=period_end,
            total_hours=12.5,
        ),
        HoursEntry(
            worker_id="W-2",
            order_id="ORD-2",
            period_start=utc(2026, 1, 5, 6),
            period_end=utc(2026, 1, 9, 6),
            lines=[
                HoursEntryLine(earning_code="REG", unit="REG_SD", quantity=16),
                HoursEntryLine(earning_code="OT", unit="OT_SD", quantity=4),
                HoursEntryLine(earning_code="DT", unit="DT_SD", quantity=2),
                HoursEntryLine(earning_code="PER_DIEM", unit="DOLLARS", quantity=75),
            ],
        ),
        HoursEntry(
            worker_id="W-1",
            order_id="ORD-1",
            period_start=utc(2025, 12, 28, 6),
            period_end=utc(2026, 1, 3, 18),
            lines=[HoursEntryLine(earning_code="REG", unit="HOURS", quantity=40)],
        ),
    ]
    session.add_all(entries)
    await session.commit()
    return entries


@pytest_asyncio.fixture
async def seeded_elections(session: AsyncSession) -> list[DeductionElection]:
    """Deduction elections for W-1 and W-2."""
    elections = [
        # Superseded by the later ETV election below
        DeductionElection(
            employee_id="W-1",
            code="ETV",
            amount_cents=500,
            effective_week=utc(2025, 12, 7),
        ),
        DeductionElection(
            employee_id="W-1",
            code="ETV",
            amount_cents=1000,
            effective_week=utc(2025, 12, 28),
        ),
        DeductionElection(
            employee_id="W-1",
            code="401K",
            percent_basis=5.0,
            effective_week=utc(2025, 12, 28),
        ),
        # Starts after the week
        DeductionElection(
            employee_id="W-2",
            code="ETV",
            amount_cents=2500,
            effective_week=utc(2026, 1, 11),
        ),
        DeductionElection(
            employee_id="W-2",
            code="UNION",
            amount_cents=1250,
            effective_week=utc(2026, 1, 4),
        ),
        DeductionElection(
            employee_id="W-2",
            code="GYM",
            amount_cents=900,
            effective_week=utc(2026, 1, 4),
            is_active=False,
        ),
        # Not in the rollup
        DeductionElection(
            employee_id="W-9",
            code="ETV",
            amount_cents=700,
            effective_week=utc(2026, 1, 4),
        ),
    ]
    session.add_all(elections)
    await session.commit()
    return elections
